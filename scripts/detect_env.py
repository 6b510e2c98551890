#!/usr/bin/env python3
"""Standalone environment check script."""

from __future__ import annotations

import argparse
from pathlib import Path

from envinspect.config import load_config
from envinspect.environment import EnvironmentInspector, detect_environment
from envinspect.utils import to_json


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect the deployment environment")
    parser.add_argument("--config", type=Path, help="Optional config override", default=None)
    parser.add_argument("--root", type=Path, help="Project root", default=None)
    parser.add_argument("--json", action="store_true", help="Emit JSON")
    args = parser.parse_args()

    config = load_config(args.config)
    inspector = EnvironmentInspector(config.inspector, project_root=args.root)
    report = detect_environment(config, inspector)

    if args.json:
        print(to_json(report))
        return

    print(f"Project root: {report.project_root}")
    print(f"CI: {report.is_ci} {', '.join(report.ci_variables)}")
    print(f"Environment: {report.environment_type}")
    print(f"Branch: {report.branch or 'unknown'}")
    print(f"Channel: {report.channel_name}")
    if report.env_file:
        status = "ok" if report.env_file.valid else "invalid"
        print(f"{config.inspector.env_file}: {status}")
    for note in report.notes:
        print(f"note: {note}")
    for issue in report.issues:
        print(f"ISSUE: {issue}")


if __name__ == "__main__":
    main()
