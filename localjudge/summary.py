from typing import Iterable

from .models import RunResult, RunSummary, Verdict


def summarize(results: Iterable[RunResult], duration_ms: float) -> RunSummary:
    """Fold per-case results into a RunSummary."""
    counts = {verdict: 0 for verdict in Verdict}
    total = 0
    for result in results:
        counts[result.verdict] += 1
        total += 1
    return RunSummary(total=total,
                      passed=counts[Verdict.AC],
                      failed=counts[Verdict.WA],
                      timeouts=counts[Verdict.TLE],
                      runtime_errors=counts[Verdict.RE],
                      duration_ms=duration_ms,
                      counts=counts)
