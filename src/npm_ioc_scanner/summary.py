"""Human-readable summary rendering for $GITHUB_STEP_SUMMARY."""

from __future__ import annotations

from typing import Any


def render_summary(report: dict[str, Any]) -> str:
    """Return a Markdown string with totals and a table of findings."""
    totals = report.get("totals", {})
    repositories = report.get("repositories", [])

    lines = []
    lines.append("# npm IOC Scan Summary")
    lines.append("")
    lines.append(
        f"Repositories: {totals.get('repositories', 0)} | "
        f"Files scanned: {totals.get('filesScanned', 0)} | "
        f"Unique packages: {totals.get('uniquePackages', 0)} | "
        f"Findings: {totals.get('findings', 0)}"
    )
    lines.append(
        f"IOC entries loaded: {totals.get('iocEntries', 0)} "
        f"({totals.get('uniqueIocEntries', 0)} unique versions, "
        f"{totals.get('iocPackages', 0)} packages)"
    )
    if report.get("interrupted"):
        lines.append("")
        lines.append("> Scan interrupted; results are partial.")
    lines.append("")
    lines.append("| Repository | File | Finding | Detail |")
    lines.append("| --- | --- | --- | --- |")

    has_rows = False

    for repo in repositories:
        name = repo.get("repository") or "(unknown repository)"
        for finding in repo.get("findings") or []:
            lines.append(
                f"| {name} | {finding.get('file', '')} | "
                f"{finding.get('package', '')}@{finding.get('installed', '')} | "
                f"compromised: {finding.get('compromised', '')} |"
            )
            has_rows = True
        for script in repo.get("maliciousScripts") or []:
            lines.append(
                f"| {name} | {script.get('file', '')} | malicious `{script.get('script', '')}` "
                f"script | `{script.get('pattern', '')}` |"
            )
            has_rows = True
        for workflow in repo.get("maliciousWorkflows") or []:
            lines.append(
                f"| {name} | {workflow.get('file', '')} | malicious workflow | "
                f"`{workflow.get('pattern', '')}` |"
            )
            has_rows = True
        for branch in repo.get("maliciousBranches") or []:
            lines.append(f"| {name} | n/a | malicious branch | `{branch.get('branch', '')}` |")
            has_rows = True

    if not has_rows:
        lines.append("| (all repositories) | n/a | No compromised packages | n/a |")

    return "\n".join(lines) + "\n"
