"""
Resource migrators.

This subpackage moves single resources from the legacy host to the object
store (:mod:`.resource_migrator`) and drives a whole record through
extraction, migration, rewriting, persistence and compensation
(:mod:`.record_processor`).
"""
