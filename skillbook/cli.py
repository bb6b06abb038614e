#!/usr/bin/env python3
"""
Skillbook CLI
List, inspect, lint and install skill documents
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from skillbook.config import load_settings
from skillbook.installer import SkillInstaller
from skillbook.lint.linter import SkillLinter, format_issue
from skillbook.services.watcher import SkillWatcher
from skillbook.skills.registry import SkillRegistry
from skillbook.skills.skill_loader import SkillLoader

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


# ========================================
# Commands
# ========================================

def cmd_list(args, settings) -> int:
    registry = SkillRegistry(args.skills_dir)
    skills = registry.list_all()
    if not skills:
        print(f"No skills found in {registry.loader.skills_dir}")
        return EXIT_OK

    width = max(len(s["name"]) for s in skills)
    for skill in skills:
        print(f"{skill['name']:<{width}}  {skill['description']}")
    return EXIT_OK


def cmd_show(args, settings) -> int:
    registry = SkillRegistry(args.skills_dir)
    if registry.get(args.name) is None:
        print(f"❌ Unknown skill: {args.name}", file=sys.stderr)
        return EXIT_USAGE

    if args.sections:
        for title in registry.loader.list_sections(registry.get(args.name)["directory"]) or []:
            print(title)
        return EXIT_OK

    print(registry.get_prompt(args.name, args.section))
    return EXIT_OK


def cmd_match(args, settings) -> int:
    registry = SkillRegistry(args.skills_dir)
    matched = registry.match(" ".join(args.task), limit=args.limit)
    if not matched:
        print("No matching skills")
        return EXIT_FAILED
    for skill in matched:
        print(f"/{skill['name']}  {skill['description']}")
    return EXIT_OK


def run_lint(skills_dir: Optional[str], strict: bool, output_format: str) -> int:
    report = SkillLinter(skills_dir, strict=strict).lint_all()

    if output_format == "json":
        print(json.dumps(report, ensure_ascii=False, indent=2))
    else:
        for issue in report["issues"]:
            print(format_issue(issue))
        status = "✅" if report["ok"] else "❌"
        print(
            f"{status} {report['files']} skill file(s) checked: "
            f"{report['errors']} error(s), {report['warnings']} warning(s)"
        )
    return EXIT_OK if report["ok"] else EXIT_FAILED


def cmd_lint(args, settings) -> int:
    return run_lint(args.skills_dir, args.strict, args.format)


def cmd_install(args, settings) -> int:
    if not args.names and not args.all:
        print("❌ Give one or more skill names, or --all", file=sys.stderr)
        return EXIT_USAGE

    installer = SkillInstaller(args.dest, args.skills_dir, validate=not args.no_validate)
    rename = not args.no_rename
    if args.all:
        results = installer.install_all(rename=rename, overwrite=args.force)
    else:
        results = [installer.install(n, rename=rename, overwrite=args.force) for n in args.names]

    failed = 0
    for result in results:
        if result["installed"]:
            print(f"✅ {result['command']} -> {result['path']}")
        else:
            failed += 1
            print(f"❌ {result['command']}: {result['error']}", file=sys.stderr)
    return EXIT_FAILED if failed else EXIT_OK


def cmd_uninstall(args, settings) -> int:
    installer = SkillInstaller(args.dest, args.skills_dir, validate=False)
    missing = 0
    for name in args.names:
        if installer.uninstall(name):
            print(f"Removed /{name}")
        else:
            missing += 1
            print(f"❌ /{name} is not installed in {installer.dest_dir}", file=sys.stderr)
    return EXIT_FAILED if missing else EXIT_OK


def cmd_installed(args, settings) -> int:
    for command in SkillInstaller(args.dest, args.skills_dir, validate=False).installed():
        print(command)
    return EXIT_OK


def cmd_watch(args, settings) -> int:
    loader = SkillLoader(args.skills_dir)
    interval = args.interval if args.interval is not None else settings["watch_interval"]

    def relint(changed):
        run_lint(args.skills_dir, args.strict, "text")

    watcher = SkillWatcher(loader.skills_dir, on_change=relint, check_interval=interval)
    print(f"Watching {loader.skills_dir} (every {interval:g}s, Ctrl-C to stop)")
    run_lint(args.skills_dir, args.strict, "text")
    try:
        watcher.run()
    except KeyboardInterrupt:
        print()
    return EXIT_OK


# ========================================
# Argument parsing
# ========================================

def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillbook",
        description="List, inspect, lint and install skill documents",
    )
    parser.add_argument('--skills-dir', default=settings["skills_dir"],
                        help='Skills directory (default: $SKILLBOOK_SKILLS_DIR or ./skills of this repo)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser('list', help='List skills with their descriptions')
    p.set_defaults(func=cmd_list)

    p = sub.add_parser('show', help='Print the body of a skill')
    p.add_argument('name', help='Skill name')
    p.add_argument('--section', action='append', help='Only print this ## section (repeatable)')
    p.add_argument('--sections', action='store_true', help='List section titles instead')
    p.set_defaults(func=cmd_show)

    p = sub.add_parser('match', help='Rank skills for a task description')
    p.add_argument('task', nargs='+', help='Task description')
    p.add_argument('--limit', type=int, default=3, help='Maximum results (default: 3)')
    p.set_defaults(func=cmd_match)

    p = sub.add_parser('lint', help='Check skill documents')
    p.add_argument('--strict', action='store_true', help='Treat warnings as failures')
    p.add_argument('--format', choices=['text', 'json'], default='text', help='Output format')
    p.set_defaults(func=cmd_lint)

    p = sub.add_parser('install', help='Copy skills into a command directory')
    p.add_argument('names', nargs='*', help='Skill names')
    p.add_argument('--all', action='store_true', help='Install every skill')
    p.add_argument('--dest', default=settings["install_dir"],
                   help='Destination directory (default: $SKILLBOOK_INSTALL_DIR)')
    p.add_argument('--no-rename', action='store_true',
                   help='Keep SKILLS.md inside <dest>/<name>/ instead of <dest>/<name>.md')
    p.add_argument('--force', action='store_true', help='Overwrite existing files')
    p.add_argument('--no-validate', action='store_true', help='Install even with lint errors')
    p.set_defaults(func=cmd_install)

    p = sub.add_parser('uninstall', help='Remove installed skills')
    p.add_argument('names', nargs='+', help='Skill names')
    p.add_argument('--dest', default=settings["install_dir"], help='Destination directory')
    p.set_defaults(func=cmd_uninstall)

    p = sub.add_parser('installed', help='List installed commands')
    p.add_argument('--dest', default=settings["install_dir"], help='Destination directory')
    p.set_defaults(func=cmd_installed)

    p = sub.add_parser('watch', help='Re-lint whenever a skill file changes')
    p.add_argument('--interval', type=float, default=None, help='Poll interval in seconds')
    p.add_argument('--strict', action='store_true', help='Treat warnings as failures')
    p.set_defaults(func=cmd_watch)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if args.verbose else getattr(logging, settings["log_level"], logging.WARNING),
    )
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
