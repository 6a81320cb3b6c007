import csv
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from resource_migrator.models import GlobalStats, RecordResult, RecordState, RecordStats, ResourceOutcome
from resource_migrator.utils.resource_map import generate_resource_map_csv

import pytest


def test_relative_urls_are_made_absolute(tmp_path):
    out = generate_resource_map_csv(
        [
            {"RecordID": "1", "OldURL": "/stuff/a.jpg", "NewURL": "https://cdn/1_a.jpg"},
            {"RecordID": "2", "OldURL": "http://www.macstories.net/stuff/b.png", "NewURL": "https://cdn/2_b.png"},
        ],
        origin="http://www.macstories.net/",
        out_path=str(tmp_path / "maps" / "resource_map.csv"),
    )
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows == [
        ["RecordID", "OldURL", "NewURL"],
        ["1", "http://www.macstories.net/stuff/a.jpg", "https://cdn/1_a.jpg"],
        ["2", "http://www.macstories.net/stuff/b.png", "https://cdn/2_b.png"],
    ]


def test_outcome_location_must_match_status():
    with pytest.raises(ValueError):
        ResourceOutcome(reference="/stuff/a.jpg", succeeded=True)
    with pytest.raises(ValueError):
        ResourceOutcome(reference="/stuff/a.jpg", succeeded=False, new_location="https://cdn/a.jpg")
    assert ResourceOutcome.failure("/stuff/a.jpg", RuntimeError("x")).error == "x"


def test_global_stats_add_counts_record_states():
    stats = GlobalStats()
    stats.add(RecordResult(record_id=1, state=RecordState.PERSISTED,
                           stats=RecordStats(found=2, processed=1, failed=1)))
    stats.add(RecordResult(record_id=2, state=RecordState.DEGRADED,
                           stats=RecordStats(found=1, processed=1, failed=0)))
    stats.add(RecordResult(record_id=3, state=RecordState.NO_RESOURCES))
    assert stats == GlobalStats(found=3, processed=2, failed=1, records=3, persisted=1, degraded=1,
                                no_resources=1)
