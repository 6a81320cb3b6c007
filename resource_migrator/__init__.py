"""
Top-level package for the WordPress resource migration utility.

This package bundles all components required to find the images and
archives referenced by WordPress posts, copy them from the legacy web host to
a Rackspace Cloud Files container, and rewrite the posts so they point at the
CDN copies.  Modules are split into subpackages:

* :mod:`resource_migrator.extractors` – discovery of resource references
* :mod:`resource_migrator.parsers` – rewriting of post content
* :mod:`resource_migrator.migrators` – per-resource and per-record migration
* :mod:`resource_migrator.stores` – content store, object store and fetcher
* :mod:`resource_migrator.utils` – logging, error reports and resource maps

Each layer has no direct knowledge of configuration or execution strategy;
orchestration is handled in :mod:`resource_migrator.migration_tool`.
"""
