"""
Command-line interface for FlowDoc.

Usage:
    flowdoc projects --store ~/.flowdoc
    flowdoc tree "Order handling"
    flowdoc export "Order handling" -o ./build/ --format mermaid
    flowdoc export "Order handling" --flow flow-1a2b3c -f svg
    flowdoc users
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from flowdoc.backend.graphviz import GraphvizExporter
from flowdoc.backend.mermaid import MermaidExporter
from flowdoc.backend.svg import SvgExporter
from flowdoc.config import get_settings
from flowdoc.core import tree
from flowdoc.core.ir import Flow, Project
from flowdoc.core.records import checklist_completion
from flowdoc.core.serialization import JsonSerializer
from flowdoc.log import setup_logging
from flowdoc.storage.backends import FileStorage
from flowdoc.storage.repository import ProjectRepository

FORMATS = ["mermaid", "graphviz", "dot", "svg", "json"]


def find_project(projects: List[Project], key: str) -> Optional[Project]:
    """Look a project up by id, then by exact name."""
    for project in projects:
        if project.id == key:
            return project
    for project in projects:
        if project.name == key:
            return project
    return None


def _safe_name(name: str) -> str:
    safe = name.lower().replace(" ", "_").replace("/", "_")
    safe = "".join(c for c in safe if c.isalnum() or c == "_")
    return safe or "flow"


def export_flow(project: Project, flow: Flow, output_path: Path, format: str) -> Path:
    """Export one flow (or, for json, the whole project) to ``output_path``."""
    if format == "mermaid":
        content = MermaidExporter.to_mermaid(flow, project=project)
        ext = ".mmd"
    elif format == "graphviz" or format == "dot":
        content = GraphvizExporter.to_dot(flow, project=project)
        ext = ".dot"
    elif format == "svg":
        content = SvgExporter.to_svg(flow, project=project)
        ext = ".svg"
    elif format == "json":
        content = JsonSerializer.to_json(project)
        ext = ".json"
    else:
        raise ValueError(f"Unknown format: {format}. Use: {', '.join(FORMATS)}")

    name = project.name if format == "json" else flow.name
    output_file = output_path / f"{_safe_name(name)}{ext}"
    output_file.write_text(content, encoding="utf-8")
    return output_file


def format_tree(project: Project) -> List[str]:
    lines = [f"{project.name} v{project.version}"]
    for depth, flow in tree.iter_tree(project):
        indent = "  " * (depth + 1)
        lines.append(
            f"{indent}{flow.name} [{flow.id}] "
            f"({len(flow.nodes)} nodes, {len(flow.edges)} edges, status={flow.status})"
        )
        if not flow.nodes:
            continue
        for node in flow.nodes:
            extra = ""
            if node.data.checklist:
                extra = f" checklist {checklist_completion(node.data.checklist):.0f}%"
            lines.append(f"{indent}  - {node.label}{extra}")
    return lines


def _cmd_projects(args, projects: List[Project]) -> int:
    if not projects:
        print(f"No projects in {args.store}")
        return 0
    for project in projects:
        print(f"  {project.id}: \"{project.name}\" v{project.version} ({len(project.flows)} flows)")
    return 0


def _cmd_tree(args, projects: List[Project]) -> int:
    project = find_project(projects, args.project)
    if project is None:
        print(f"Error: No project named '{args.project}' found", file=sys.stderr)
        return 1
    print("\n".join(format_tree(project)))
    return 0


def _cmd_export(args, projects: List[Project]) -> int:
    project = find_project(projects, args.project)
    if project is None:
        print(f"Error: No project named '{args.project}' found", file=sys.stderr)
        return 1

    if args.flow:
        flows = [f for f in project.flows if f.id == args.flow or f.name == args.flow]
        if not flows:
            print(f"Error: No flow named '{args.flow}' found", file=sys.stderr)
            return 1
    elif args.all or args.format == "json":
        flows = list(project.flows) if args.all else project.flows[:1]
    else:
        root = project.root_flow
        flows = [root] if root else []
    if not flows:
        print(f"Error: Project '{project.name}' has no flows", file=sys.stderr)
        return 1

    args.output.mkdir(parents=True, exist_ok=True)
    for flow in flows:
        try:
            output_file = export_flow(project, flow, args.output, args.format)
        except Exception as e:
            print(f"Error exporting {flow.name}: {e}", file=sys.stderr)
            return 1
        if args.verbose:
            path = " > ".join(f.name for f in tree.build_path(project, flow))
            print(f"Exported '{path}' -> {output_file}")
        else:
            print(f"{output_file}")
        if args.format == "json":
            break
    return 0


def _cmd_users(args, storage: FileStorage) -> int:
    from flowdoc.auth.service import AuthService

    auth = AuthService(storage)
    accounts = auth.accounts()
    if not accounts:
        print("No registered users")
        return 0
    current = auth.current_user["id"] if auth.current_user else None
    for account in accounts:
        marker = "*" if account.id == current else " "
        print(f" {marker} {account.name} <{account.email}> role={account.role}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowdoc",
        description="Inspect and export FlowDoc projects.",
        epilog="Example: flowdoc export 'Order handling' -o ./build/ -f mermaid",
    )
    parser.add_argument(
        "-s", "--store",
        type=Path,
        default=None,
        help="Storage directory (default: FLOWDOC_STORAGE_DIR or ./.flowdoc)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("projects", help="List projects")

    tree_parser = sub.add_parser("tree", help="Print the flow hierarchy of a project")
    tree_parser.add_argument("project", help="Project id or name")

    export_parser = sub.add_parser("export", help="Export flows of a project")
    export_parser.add_argument("project", help="Project id or name")
    export_parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("."),
        help="Output directory (default: current directory)"
    )
    export_parser.add_argument(
        "-f", "--format",
        choices=FORMATS,
        default="mermaid",
        help="Output format (default: mermaid)"
    )
    export_parser.add_argument("--flow", type=str, help="Export only the flow with this id or name")
    export_parser.add_argument("-a", "--all", action="store_true", help="Export every flow of the project")

    sub.add_parser("users", help="List registered accounts")
    return parser


def main(argv: List[str] = None) -> int:
    """Main CLI entrypoint."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(args.verbose or settings.debug)
    if args.store is None:
        args.store = settings.storage_dir

    storage = FileStorage(args.store)
    if args.command == "users":
        return _cmd_users(args, storage)

    projects = ProjectRepository(storage).load()
    if args.command == "projects":
        return _cmd_projects(args, projects)
    if args.command == "tree":
        return _cmd_tree(args, projects)
    if args.command == "export":
        return _cmd_export(args, projects)
    return 1


if __name__ == "__main__":
    sys.exit(main())
