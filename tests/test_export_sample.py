"""
Tests de export_sample.py (muestra cruda + normalizada sin tocar MongoDB).
"""

import os
import sys
import tempfile
from datetime import datetime, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bson.json_util import loads

import export_sample
from migrators import ftp_posts
from tests.helpers import FakeSolrSession, run_suite


def test_build_sample_marks_rejected():
    sample = export_sample.build_sample(
        [{"id": "1", "IsFound": True}, {"IsFound": False}], ftp_posts.transform
    )
    assert sample[0]["normalized"] == {"_id": 1, "found": True}
    assert sample[0]["rejected"] is None
    assert sample[1]["normalized"] is None
    assert sample[1]["rejected"]
    print("   ✅ Rechazados con motivo")


def test_export_job_sample():
    print("\n🔍 Test: export_job_sample")

    docs = [
        {"id": "2", "IsFound": True, "FoundDate": "2021-05-03T10:00:00Z"},
        {"id": "1", "Title": "Где это?", "IsFound": False},
        {"id": "3"},
    ]
    session = FakeSolrSession({"ftp_posts": docs})

    with tempfile.TemporaryDirectory() as tmp:
        path = export_sample.export_job_sample(
            "ftp_posts", limit=2, samples_dir=tmp, session=session
        )
        assert path.name == "ftp_posts_sample.json"
        with open(path, encoding="utf-8") as f:
            content = f.read()

    sample = loads(content)
    assert [item["raw"]["id"] for item in sample] == ["1", "2"]
    assert "Где это?" in content
    found_date = sample[1]["normalized"]["found_date"]
    assert found_date.replace(tzinfo=timezone.utc) == datetime(2021, 5, 3, 10, tzinfo=timezone.utc)

    assert session.calls[0][1]["rows"] == 2
    assert not session.closed, "La sesión recibida no se cierra"
    print("   ✅ Archivo JSON con primera página")


def test_empty_core_writes_nothing():
    with tempfile.TemporaryDirectory() as tmp:
        path = export_sample.export_job_sample(
            "dirty_users", limit=5, samples_dir=tmp, session=FakeSolrSession({"d3_users": []})
        )
        assert path is None
        assert os.listdir(tmp) == []
    print("   ✅ Core vacío sin archivo")


def run_all_tests():
    return run_suite(
        "TESTS DE EXPORT SAMPLE",
        [
            test_build_sample_marks_rejected,
            test_export_job_sample,
            test_empty_core_writes_nothing,
        ],
    )


if __name__ == "__main__":
    sys.exit(0 if run_all_tests() else 1)
