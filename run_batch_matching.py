import argparse
import csv
import json
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from dotenv import load_dotenv

load_dotenv()

from talentmatch.models import ApiResponse
from talentmatch.orchestrator import (
    DEFAULT_THRESHOLD,
    InvalidThresholdError,
    MatchOrchestrator,
    parse_threshold,
)
from talentmatch.services.records import InvalidRecordError, job_from_record
from talentmatch.services.repository import JsonFileRepository, RepositoryError, skills_distribution


FIELDNAMES = [
    "run_id",
    "timestamp_utc",
    "job_id",
    "job_title",
    "threshold",
    "rank",
    "candidate_id",
    "candidate_name",
    "candidate_experience",
    "match_score",
    "score_skills",
    "score_experience",
    "score_location",
    "score_role_fit",
    "n_job_skills",
    "n_candidate_skills",
    "skipped_candidates",
    "elapsed_ms",
    "error",
]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json_dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Calcola il match tra job e candidati (file JSON) e salva un CSV "
            "con score, breakdown e statistiche riassuntive."
        )
    )
    parser.add_argument("--jobs", default=os.getenv("MATCH_JOBS_FILE", "data/sample_jobs.json"), help="File JSON con i job.")
    parser.add_argument("--candidates", default=os.getenv("MATCH_CANDIDATES_FILE", "data/sample_candidates.json"), help="File JSON con i candidati.")
    parser.add_argument("--job-id", default=None, help="Se indicato, calcola il match solo per questo job.")
    parser.add_argument("--threshold", default=os.getenv("MATCH_THRESHOLD", str(DEFAULT_THRESHOLD)), help="Score minimo (0-100, incluso).")
    parser.add_argument("--out", default="data/results/batch_matches.csv", help="Percorso output CSV.")
    parser.add_argument("--json", action="store_true", help="Stampa l'envelope JSON dell'API invece di scrivere il CSV.")
    parser.add_argument("--top-skills", type=int, default=10, help="Numero di skill nel riepilogo.")
    parser.add_argument("--verbose", action="store_true", help="Abilita log verbose dell'orchestrator.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    project_root = Path(__file__).resolve().parent
    jobs_path = (project_root / args.jobs).resolve()
    candidates_path = (project_root / args.candidates).resolve()
    out_path = (project_root / args.out).resolve()

    try:
        threshold = parse_threshold(args.threshold)
        repository = JsonFileRepository(jobs_path, candidates_path)
    except (InvalidThresholdError, RepositoryError) as e:
        print(f"ERRORE: {e}")
        return 2

    job_records = repository.list_jobs()
    if args.job_id is not None:
        job_records = [r for r in [repository.get_job(args.job_id)] if r is not None]
        if not job_records:
            print(f"ERRORE: job '{args.job_id}' non trovato in {jobs_path}")
            return 2
    if not job_records:
        print(f"ERRORE: nessun job trovato in: {jobs_path}")
        return 2

    orchestrator = MatchOrchestrator(
        job_repository=repository,
        candidate_repository=repository,
        default_threshold=threshold,
        verbose=args.verbose,
    )

    if args.json:
        return _print_json(orchestrator, repository, job_records, threshold, args.job_id)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    write_header = not out_path.exists()
    candidates = repository.list_candidates()
    processed = 0
    batch_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
    run_ids: Set[str] = set()

    with out_path.open("a", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        if write_header:
            writer.writeheader()

        for index, record in enumerate(job_records):
            job_id = str(record.get("id", f"#{index}")) if isinstance(record, dict) else f"#{index}"
            run_id = f"{job_id}__{batch_id}"
            run_ids.add(run_id)
            started = time.perf_counter()
            base: Dict[str, Any] = {
                "run_id": run_id,
                "timestamp_utc": _utc_now_iso(),
                "job_id": job_id,
                "threshold": threshold,
            }

            try:
                job = job_from_record(record)
                result = orchestrator.match_job(job, candidates, threshold)
            except InvalidRecordError as e:
                row = dict(base, elapsed_ms=int((time.perf_counter() - started) * 1000), error=f"{type(e).__name__}: {e}")
                writer.writerow(row)
                processed += 1
                print(f"  [{processed}] ERRORE {job_id}: {row['error']}")
                continue

            elapsed_ms = int((time.perf_counter() - started) * 1000)
            for rank, match in enumerate(result.matches, start=1):
                candidate = match.candidate
                writer.writerow(dict(
                    base,
                    job_title=job.title,
                    rank=rank,
                    candidate_id=candidate.id or "",
                    candidate_name=candidate.name,
                    candidate_experience=candidate.experience_years,
                    match_score=match.match_score,
                    score_skills=match.breakdown.skills,
                    score_experience=match.breakdown.experience,
                    score_location=match.breakdown.location,
                    score_role_fit=match.breakdown.role_fit,
                    n_job_skills=len(job.skills),
                    n_candidate_skills=len(candidate.skills),
                    skipped_candidates=len(result.skipped),
                    elapsed_ms=elapsed_ms,
                    error="",
                ))
            f.flush()
            processed += 1
            best = f" best={result.matches[0].match_score}" if result.matches else ""
            print(f"  [{processed}] OK {job_id} ({job.title}) -> {len(result.matches)} match{best}")

    stats_path = out_path.parent / f"{out_path.stem}_stats.csv"
    _generate_match_stats(
        out_path,
        stats_path,
        run_ids=run_ids,
        job_records=job_records,
        candidate_records=candidates,
        top_skills=args.top_skills,
    )
    return 0


def _print_json(
    orchestrator: MatchOrchestrator,
    repository: JsonFileRepository,
    job_records: List[Any],
    threshold: float,
    job_id: Optional[str] = None,
) -> int:
    if job_id is not None:
        print(_json_dumps(orchestrator.matches_response(job_id, threshold).to_dict()))
        return 0

    candidates = repository.list_candidates()
    responses: Dict[str, Any] = {}
    for index, record in enumerate(job_records):
        record_id = record.get("id") if isinstance(record, dict) else None
        # senza id (o con id ripetuto) la chiave e' la posizione nel file
        key = str(record_id) if record_id is not None and str(record_id) not in responses else f"#{index}"
        try:
            result = orchestrator.match_job(job_from_record(record), candidates, threshold)
        except InvalidRecordError as e:
            responses[key] = ApiResponse.error("INVALID_JOB", str(e)).to_dict()
            continue
        responses[key] = ApiResponse.ok(result.matches_as_dicts()).to_dict()

    if len(responses) == 1:
        print(_json_dumps(next(iter(responses.values()))))
    else:
        print(_json_dumps(responses))
    return 0


# ═══════════════════════════════════════════════════════════════════════
# SUMMARY STATS
# ═══════════════════════════════════════════════════════════════════════

def _safe_float(row: Dict[str, Any], key: str, default: float = 0.0) -> float:
    try:
        return float(row[key])
    except (ValueError, KeyError, TypeError):
        return default


def _median(values: List[float]) -> float:
    if not values:
        return 0.0
    s = sorted(values)
    n = len(s)
    if n % 2 == 1:
        return s[n // 2]
    return (s[n // 2 - 1] + s[n // 2]) / 2


def _std_dev(values: List[float]) -> float:
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return (sum((x - mean) ** 2 for x in values) / (len(values) - 1)) ** 0.5


def _score_buckets(scores: List[float]) -> Dict[str, int]:
    buckets = {"0-20": 0, "21-40": 0, "41-60": 0, "61-80": 0, "81-100": 0}
    for s in scores:
        if s <= 20:
            buckets["0-20"] += 1
        elif s <= 40:
            buckets["21-40"] += 1
        elif s <= 60:
            buckets["41-60"] += 1
        elif s <= 80:
            buckets["61-80"] += 1
        else:
            buckets["81-100"] += 1
    return buckets


def _generate_match_stats(
    csv_path: Path,
    stats_path: Path,
    run_ids: Set[str],
    job_records: List[Any],
    candidate_records: List[Any],
    top_skills: int = 10,
) -> None:
    """
    Scrive un CSV section/metric/value con le statistiche del batch.

    Il CSV dei match e' in append: si considerano solo le righe di questo
    run (run_id in run_ids), come per i conteggi di job e candidati.
    """
    if not csv_path.exists():
        return
    with csv_path.open("r", encoding="utf-8", newline="") as f:
        rows = [r for r in csv.DictReader(f) if r.get("run_id") in run_ids]

    ok_rows = [r for r in rows if not r.get("error") and r.get("match_score")]
    error_rows = [r for r in rows if r.get("error")]
    scores = [_safe_float(r, "match_score") for r in ok_rows]

    stats: List[Dict[str, str]] = []

    def _add(section: str, metric: str, value: Any) -> None:
        stats.append({"section": section, "metric": metric, "value": str(value)})

    # — Overview —
    _add("overview", "total_rows", len(rows))
    _add("overview", "match_rows", len(ok_rows))
    _add("overview", "error_rows", len(error_rows))
    _add("overview", "jobs", len(job_records))
    _add("overview", "candidates", len(candidate_records))

    # — Score distribution —
    if scores:
        _add("score", "mean", f"{sum(scores)/len(scores):.2f}")
        _add("score", "median", f"{_median(scores):.2f}")
        _add("score", "std_dev", f"{_std_dev(scores):.2f}")
        _add("score", "min", f"{min(scores):.2f}")
        _add("score", "max", f"{max(scores):.2f}")
        for bucket, count in _score_buckets(scores).items():
            _add("score_distribution", f"bucket_{bucket}", count)

        # — Breakdown —
        for key in ("score_skills", "score_experience", "score_location", "score_role_fit"):
            values = [_safe_float(r, key) for r in ok_rows]
            _add("score_breakdown", f"{key.replace('score_', '')}_mean", f"{sum(values)/len(values):.2f}")

    # — Per-job —
    per_job: Dict[str, List[float]] = {}
    for r in ok_rows:
        per_job.setdefault(r.get("job_id", ""), []).append(_safe_float(r, "match_score"))
    for job_id, job_scores in sorted(per_job.items()):
        _add("per_job", f"{job_id}|count", len(job_scores))
        _add("per_job", f"{job_id}|mean", f"{sum(job_scores)/len(job_scores):.2f}")
        _add("per_job", f"{job_id}|max", f"{max(job_scores):.2f}")

    # — Skills —
    for skill, count in skills_distribution(job_records, limit=top_skills):
        _add("job_skills", skill, count)
    for skill, count in skills_distribution(candidate_records, limit=top_skills):
        _add("candidate_skills", skill, count)

    stats_path.parent.mkdir(parents=True, exist_ok=True)
    with stats_path.open("w", encoding="utf-8", newline="") as sf:
        w = csv.DictWriter(sf, fieldnames=["section", "metric", "value"])
        w.writeheader()
        w.writerows(stats)

    print("\n" + "=" * 70)
    print("  SUMMARY – Batch Matching Results")
    print("=" * 70)
    print(f"  Righe: {len(rows)} totali ({len(ok_rows)} match, {len(error_rows)} errori)")
    if scores:
        print(f"  Score: media={sum(scores)/len(scores):.1f}  mediana={_median(scores):.1f}  "
              f"min={min(scores):.1f}  max={max(scores):.1f}  std={_std_dev(scores):.1f}")
        print(f"  Distribuzione: {_score_buckets(scores)}")
    print(f"  Output CSV: {csv_path}")
    print(f"  Stats CSV:  {stats_path}")
    print("=" * 70)


if __name__ == "__main__":
    raise SystemExit(main())
