"""
Tests for the batch matching CLI.
"""

import csv
import json
import pytest

import run_batch_matching


def _read_csv(path):
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


class TestBatchCsv:
    """CSV output and summary stats."""

    def test_writes_rows_and_stats(self, tmp_path, jobs_file, candidates_file, capsys):
        out = tmp_path / "results" / "matches.csv"
        code = run_batch_matching.main([
            "--jobs", str(jobs_file),
            "--candidates", str(candidates_file),
            "--threshold", "0",
            "--out", str(out),
        ])

        assert code == 0
        rows = _read_csv(out)
        # 2 job x 5 candidati, soglia 0
        assert len(rows) == 10
        job1 = [r for r in rows if r["job_id"] == "job-1"]
        assert [r["candidate_name"] for r in job1][:1] == ["Sarah Johnson"]
        assert [int(r["match_score"]) for r in job1] == [96, 58, 58, 50, 38]
        assert [r["rank"] for r in job1] == ["1", "2", "3", "4", "5"]

        stats = _read_csv(tmp_path / "results" / "matches_stats.csv")
        metrics = {(s["section"], s["metric"]): s["value"] for s in stats}
        assert metrics[("overview", "match_rows")] == "10"
        assert metrics[("per_job", "job-1|max")] == "96.00"
        assert metrics[("candidate_skills", "Docker")] == "2"

        printed = capsys.readouterr().out
        assert "OK job-1" in printed
        assert "SUMMARY" in printed

    def test_single_job_with_default_threshold(self, tmp_path, jobs_file, candidates_file):
        out = tmp_path / "one.csv"
        code = run_batch_matching.main([
            "--jobs", str(jobs_file),
            "--candidates", str(candidates_file),
            "--job-id", "job-1",
            "--out", str(out),
        ])

        assert code == 0
        rows = _read_csv(out)
        assert [(r["candidate_id"], r["match_score"]) for r in rows] == [("candidate-1", "96")]

    def test_invalid_job_is_recorded_as_error(self, tmp_path, candidates_file):
        jobs = tmp_path / "jobs.json"
        jobs.write_text(json.dumps([{"id": "bad", "experience_min": 9, "experience_max": 1}]))
        out = tmp_path / "err.csv"

        code = run_batch_matching.main([
            "--jobs", str(jobs), "--candidates", str(candidates_file), "--out", str(out),
        ])

        assert code == 0
        [row] = _read_csv(out)
        assert row["job_id"] == "bad"
        assert row["error"].startswith("InvalidRecordError")

    def test_stats_cover_only_the_current_run(self, tmp_path, jobs_file, candidates_file):
        out = tmp_path / "matches.csv"
        argv = [
            "--jobs", str(jobs_file), "--candidates", str(candidates_file),
            "--threshold", "0", "--out", str(out),
        ]

        assert run_batch_matching.main(argv) == 0
        assert run_batch_matching.main(argv) == 0

        # il CSV dei match accumula i run, le statistiche no
        assert len(_read_csv(out)) == 20
        stats = _read_csv(tmp_path / "matches_stats.csv")
        metrics = {(s["section"], s["metric"]): s["value"] for s in stats}
        assert metrics[("overview", "total_rows")] == "10"
        assert metrics[("overview", "match_rows")] == "10"
        assert metrics[("per_job", "job-1|count")] == "5"


class TestBatchErrors:
    """Exit status 2 on unusable input."""

    def test_unknown_job_id(self, tmp_path, jobs_file, candidates_file):
        code = run_batch_matching.main([
            "--jobs", str(jobs_file), "--candidates", str(candidates_file),
            "--job-id", "job-404", "--out", str(tmp_path / "x.csv"),
        ])
        assert code == 2
        assert not (tmp_path / "x.csv").exists()

    def test_invalid_threshold(self, tmp_path, jobs_file, candidates_file):
        code = run_batch_matching.main([
            "--jobs", str(jobs_file), "--candidates", str(candidates_file),
            "--threshold", "150", "--out", str(tmp_path / "x.csv"),
        ])
        assert code == 2

    def test_malformed_jobs_file(self, tmp_path, candidates_file):
        jobs = tmp_path / "jobs.json"
        jobs.write_text("[{")
        code = run_batch_matching.main([
            "--jobs", str(jobs), "--candidates", str(candidates_file), "--out", str(tmp_path / "x.csv"),
        ])
        assert code == 2

    def test_no_jobs(self, tmp_path, candidates_file):
        code = run_batch_matching.main([
            "--jobs", str(tmp_path / "missing.json"), "--candidates", str(candidates_file),
            "--out", str(tmp_path / "x.csv"),
        ])
        assert code == 2


class TestBatchJson:
    """--json prints the API envelope."""

    def test_single_job_envelope(self, jobs_file, candidates_file, capsys):
        code = run_batch_matching.main([
            "--jobs", str(jobs_file), "--candidates", str(candidates_file),
            "--job-id", "job-1", "--threshold", "55", "--json",
        ])

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "ok"
        assert [m["match_score"] for m in payload["data"]] == [96, 58, 58]

    def test_all_jobs_keyed_by_id(self, jobs_file, candidates_file, capsys):
        code = run_batch_matching.main([
            "--jobs", str(jobs_file), "--candidates", str(candidates_file), "--json",
        ])

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert set(payload) == {"job-1", "job-2"}
        assert [m["match_score"] for m in payload["job-2"]["data"]] == [84]

    def test_job_without_id_is_scored(self, tmp_path, candidates_file, capsys):
        jobs = tmp_path / "jobs.json"
        jobs.write_text(json.dumps([{"title": "React Developer", "skills": ["React"], "location": "Remote"}]))

        code = run_batch_matching.main([
            "--jobs", str(jobs), "--candidates", str(candidates_file), "--threshold", "0", "--json",
        ])

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "ok"
        assert len(payload["data"]) == 5

    def test_duplicate_and_invalid_jobs_keep_their_entries(self, tmp_path, candidates_file, capsys):
        jobs = tmp_path / "jobs.json"
        jobs.write_text(json.dumps([
            {"id": "dup", "title": "React Developer", "skills": ["React"]},
            {"id": "dup", "title": "Backend Engineer", "skills": ["Python"]},
            {"title": "Broken", "experience_min": 9, "experience_max": 1},
        ]))

        code = run_batch_matching.main([
            "--jobs", str(jobs), "--candidates", str(candidates_file), "--threshold", "0", "--json",
        ])

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert list(payload) == ["dup", "#1", "#2"]
        assert payload["dup"]["status"] == "ok"
        assert payload["#1"]["status"] == "ok"
        assert payload["#2"]["errors"][0]["code"] == "INVALID_JOB"


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    for name in ("MATCH_THRESHOLD", "MATCH_JOBS_FILE", "MATCH_CANDIDATES_FILE"):
        monkeypatch.delenv(name, raising=False)
