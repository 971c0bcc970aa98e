"""CLI for claim-registry.

Convention-based: discovers .claim-registry/ by walking up from cwd.

Usage:
    claim-registry init --registry-url=https://registry.example   # Create .claim-registry/
    claim-registry claims --category=cli                          # List registered claims
    claim-registry delete --name=hacky --category=cli \\
        --repository=acme/infra                                   # Open a deletion PR
    claim-registry delete --claim-data='{"name": ...}' --dry-run  # Show the plan only
    claim-registry serve --port=8377                              # Run the HTTP action API
"""

from __future__ import annotations

import json as json_mod
import sys
from pathlib import Path

import click

from claim_registry import __version__
from claim_registry.cli_common import fail, get_config, open_registry, open_store
from claim_registry.config import CONFIG_DIR_NAME, default_config, load_config, write_config
from claim_registry.errors import ClaimRegistryError, NothingToDelete
from claim_registry.locator import locate
from claim_registry.logging import setup_logging
from claim_registry.orchestrator import delete_claim, plan_claim_deletion

DEFAULT_PORT = 8377


@click.group()
@click.version_option(version=__version__, prog_name="claim-registry")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """claim-registry: delete registry claims through GitHub pull requests."""
    ctx.ensure_object(dict)
    config, config_dir = load_config()
    ctx.obj["config"] = config
    ctx.obj["config_dir"] = config_dir
    if config_dir is not None:
        setup_logging(config_dir)


@cli.command()
@click.option("--api-url", default=None, help="GitHub API base URL (default: https://api.github.com)")
@click.option("--registry-url", default=None, help="Base URL of the claim registry service")
@click.option("--target-branch", default=None, help="Default branch deletion PRs target (default: main)")
def init(api_url: str | None, registry_url: str | None, target_branch: str | None) -> None:
    """Initialize .claim-registry/ in the current directory."""
    cwd = Path.cwd()
    config_dir = cwd / CONFIG_DIR_NAME
    if config_dir.exists():
        click.echo(f"{CONFIG_DIR_NAME}/ already exists in {cwd}")
        return

    config = default_config()
    if api_url:
        config["api_url"] = api_url
    if registry_url:
        config["registry_url"] = registry_url
    if target_branch:
        config["target_branch"] = target_branch
    config_dir.mkdir()
    write_config(config_dir, config)

    click.echo(f"Initialized {CONFIG_DIR_NAME}/ in {cwd}")
    click.echo(f"  API:      {config['api_url']}")
    click.echo(f"  Branch:   {config['target_branch']}")
    if registry_url:
        click.echo(f"  Registry: {registry_url}")
    click.echo("\nSet GITHUB_TOKEN (or github_token in config.json) before deleting claims.")


@cli.command()
@click.option("--claim-data", default=None, help="JSON claim descriptor from the registry picker")
@click.option("--name", default=None, help="Override: claim name")
@click.option("--path", "claim_path", default=None, help="Override: claim file path in the repository")
@click.option("--category", default=None, help="Override: claim category (e.g. infra, apps)")
@click.option("--repository", default=None, help="Override: GitHub repository as owner/repo")
@click.option("--target-branch", default=None, help="Branch the PR targets (default: config or main)")
@click.option("--token", default=None, help="GitHub token (default: config or $GITHUB_TOKEN)")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing anything")
@click.option("--reuse-open-pr", is_flag=True, help="Return an already-open PR for the same branch instead of opening another")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def delete(
    ctx: click.Context,
    claim_data: str | None,
    name: str | None,
    claim_path: str | None,
    category: str | None,
    repository: str | None,
    target_branch: str | None,
    token: str | None,
    dry_run: bool,
    reuse_open_pr: bool,
    as_json: bool,
) -> None:
    """Open a pull request that deletes a claim."""
    config = get_config(ctx)
    branch = target_branch or config.get("target_branch", "main")
    try:
        claim = locate(claim_data, name=name, path=claim_path, category=category, repository=repository)
        with open_store(config, claim, token) as store:
            if dry_run:
                mutation = plan_claim_deletion(store, claim, target_branch=branch)
            else:
                result = delete_claim(store, claim, target_branch=branch, reuse_open_pr=reuse_open_pr)
    except NothingToDelete as e:
        if as_json:
            click.echo(json_mod.dumps({"status": "nothing_to_delete", "message": str(e), "code": e.code}))
        else:
            click.echo(f"Nothing to delete: claim is already absent from {e.claim_dir}/")
        return
    except ClaimRegistryError as e:
        fail(e, as_json=as_json)

    if dry_run:
        rewrite = mutation.manifest_rewrite
        if as_json:
            payload = {
                "branch": claim.branch_name,
                "deletions": mutation.deleted_paths,
                "usedDirectoryMatch": mutation.used_directory_match,
                "manifestRewrite": {"path": rewrite.path, "content": rewrite.content} if rewrite else None,
            }
            click.echo(json_mod.dumps(payload, indent=2))
            return
        click.echo(f"Branch:   {claim.branch_name}")
        for path in mutation.deleted_paths:
            click.echo(f"  delete  {path}")
        if rewrite:
            click.echo(f"  rewrite {rewrite.path}")
        return

    if as_json:
        click.echo(json_mod.dumps(result.to_dict(), indent=2))
        return
    verb = "Reused" if result.reused_pull_request else "Opened"
    click.echo(f"{verb} PR #{result.pull_request_number}: {result.pull_request_url}")
    click.echo(f"  Branch:  {result.branch}")
    click.echo(f"  Deleted: {len(result.deleted_paths)} file(s)")
    if result.manifest_updated:
        click.echo(f"  Updated: {claim.manifest_path}")


@cli.command("claims")
@click.option("--status", default=None, help="Filter by status")
@click.option("--category", default=None, help="Filter by category")
@click.option("--template", default=None, help="Filter by template")
@click.option("--registry-url", default=None, help="Registry base URL (default: from config)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_claims(
    ctx: click.Context,
    status: str | None,
    category: str | None,
    template: str | None,
    registry_url: str | None,
    as_json: bool,
) -> None:
    """List claims known to the registry."""
    url = registry_url or get_config(ctx).get("registry_url")
    if not url:
        fail("No registry URL. Pass --registry-url or set registry_url in config.json.", as_json=as_json)
    try:
        with open_registry(url) as registry:
            entries = registry.list_claims(status=status, category=category, template=template)
    except ClaimRegistryError as e:
        fail(e, as_json=as_json)

    if as_json:
        click.echo(json_mod.dumps([e.to_dict() for e in entries], indent=2))
        return
    if not entries:
        click.echo("No claims found.")
        return
    for entry in entries:
        click.echo(f"{entry.name:30s} {entry.category:12s} {entry.status:10s} {entry.repository}")


@cli.command()
@click.option("--port", default=DEFAULT_PORT, type=int, help=f"Port to listen on (default {DEFAULT_PORT})")
@click.pass_context
def serve(ctx: click.Context, port: int) -> None:
    """Run the HTTP action API."""
    import uvicorn

    from claim_registry.api import create_app

    app = create_app(get_config(ctx))
    click.echo(f"claim-registry API: http://localhost:{port}")
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    sys.exit(main())
