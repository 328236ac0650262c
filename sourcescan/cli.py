"""SourceScan CLI — the main entry point for the verified-contract registry."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sourcescan import __version__

console = Console()

T = TypeVar("T")


class _Settings:
    def __init__(self, registry_dir: str, caller: str | None, audit_dir: str | None):
        self.registry_dir = registry_dir
        self.caller = caller
        self.audit_dir = audit_dir

    def registry(self):
        from sourcescan.registry.local_registry import SourceScanRegistry
        from sourcescan.security.audit_log import AuditLogger

        return SourceScanRegistry(self.registry_dir, audit=AuditLogger(self.audit_dir))

    def require_caller(self) -> str:
        if not self.caller:
            console.print("[red]Error:[/] no caller identity; pass --as or set SOURCESCAN_CALLER")
            raise SystemExit(1)
        return self.caller


pass_settings = click.make_pass_decorator(_Settings)


def _run(action: Callable[[], T]) -> T:
    """Run a registry operation, turning registry errors into a clean exit."""
    from sourcescan.registry.errors import RegistryError

    try:
        return action()
    except RegistryError as exc:
        console.print(f"[red]{type(exc).__name__}:[/] {exc}")
        raise SystemExit(1)


def _fmt_ts(ns: int) -> str:
    return datetime.fromtimestamp(ns / 1e9, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--registry-dir", "-r",
    default=".sourcescan_registry",
    envvar="SOURCESCAN_REGISTRY_DIR",
    show_default=True,
    help="Registry state directory",
)
@click.option("--as", "caller", default=None, envvar="SOURCESCAN_CALLER", help="Caller identity")
@click.option("--audit-dir", default=None, envvar="SOURCESCAN_AUDIT_DIR", help="Audit log directory")
@click.pass_context
def main(ctx: click.Context, registry_dir: str, caller: str | None, audit_dir: str | None):
    """SourceScan — registry of verified contract builds.

    Maps deployed accounts to the source, toolchain and code hash of a
    reproducible build, with votes and comments from the community.
    """
    ctx.obj = _Settings(registry_dir, caller, audit_dir)


# ── Ownership ────────────────────────────────────────────────────────


@main.command()
@pass_settings
def init(settings: _Settings):
    """Initialize an empty registry owned by the caller."""
    caller = settings.require_caller()
    reg = settings.registry()
    _run(lambda: reg.initialize(caller))
    console.print(f"  Registry initialized, owner: [cyan]{caller}[/]")


@main.group()
def owner():
    """Show or transfer registry ownership."""


@owner.command(name="show")
@pass_settings
def owner_show(settings: _Settings):
    """Print the current owner."""
    reg = settings.registry()
    console.print(_run(reg.get_owner))


@owner.command(name="set")
@click.argument("new_owner")
@pass_settings
def owner_set(settings: _Settings, new_owner: str):
    """Transfer ownership to NEW_OWNER (owner only)."""
    caller = settings.require_caller()
    reg = settings.registry()
    _run(lambda: reg.set_owner(caller, new_owner))
    console.print(f"  Owner changed to [cyan]{new_owner}[/]")


# ── Contracts ────────────────────────────────────────────────────────


@main.group()
def contract():
    """Register, inspect and list verified contracts."""


@contract.command(name="set")
@click.argument("account_id")
@click.option("--cid", required=True, help="Content address of the verified source")
@click.option("--code-hash", required=True, help="Hash of the deployed code")
@click.option("--lang", required=True, help="Source language")
@click.option("--entry-point", required=True, help="Build entry point")
@click.option("--builder-image", required=True, help="Builder image used for the build")
@click.option("--github", nargs=3, default=None, metavar="OWNER REPO SHA", help="Source revision on GitHub")
@pass_settings
def contract_set(
    settings: _Settings,
    account_id: str,
    cid: str,
    code_hash: str,
    lang: str,
    entry_point: str,
    builder_image: str,
    github: tuple[str, str, str] | None,
):
    """Register or overwrite the build record of ACCOUNT_ID (owner only)."""
    from sourcescan.registry.models import GithubData

    caller = settings.require_caller()
    reg = settings.registry()
    gh = GithubData(*github) if github else None
    _run(
        lambda: reg.set_contract(
            caller,
            account_id,
            cid=cid,
            code_hash=code_hash,
            lang=lang,
            entry_point=entry_point,
            builder_image=builder_image,
            github=gh,
        )
    )
    console.print(f"  Contract [cyan]{account_id}[/] added")


@contract.command()
@click.argument("manifest_path", type=click.Path(exists=True, dir_okay=False))
@pass_settings
def publish(settings: _Settings, manifest_path: str):
    """Register a contract from a YAML build manifest (owner only)."""
    caller = settings.require_caller()
    reg = settings.registry()
    record = _run(lambda: reg.publish(caller, manifest_path))
    console.print(f"  Published: [cyan]{manifest_path}[/] (code hash {record.code_hash})")


@contract.command(name="show")
@click.argument("account_id")
@pass_settings
def contract_show(settings: _Settings, account_id: str):
    """Show the build record of ACCOUNT_ID."""
    reg = settings.registry()
    record = _run(lambda: reg.get_contract(account_id))
    if record is None:
        console.print(f"[yellow]No contract registered for {account_id}.[/]")
        return

    lines = [
        f"CID:           {record.cid}",
        f"Code hash:     {record.code_hash}",
        f"Language:      {record.lang}",
        f"Entry point:   {record.entry_point}",
        f"Builder image: {record.builder_image}",
    ]
    if record.github:
        lines.append(f"Source:        {record.github.url}")
    lines.append(f"Votes:         {len(record.votes)} (score {record.votes.score})")
    lines.append(f"Comments:      {len(record.comments)}")
    console.print(Panel("\n".join(lines), title=account_id))


@contract.command()
@click.argument("account_id")
@pass_settings
def purge(settings: _Settings, account_id: str):
    """Remove the record of ACCOUNT_ID (owner only)."""
    caller = settings.require_caller()
    reg = settings.registry()
    _run(lambda: reg.purge_contract(caller, account_id))
    console.print(f"  Contract [cyan]{account_id}[/] removed")


def _print_page(page, title: str, from_index: int, limit: int) -> None:
    if not page.entries:
        console.print("[yellow]No matching contracts found.[/]")
        return

    table = Table(title=f"{title} (page {from_index // limit + 1} of {page.pages})")
    table.add_column("Account", style="cyan", no_wrap=True)
    table.add_column("Language")
    table.add_column("Code hash")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Comments", justify="right")

    for account_id, record in page.entries:
        table.add_row(
            account_id,
            record.lang,
            record.code_hash[:16],
            str(record.votes.score),
            str(len(record.comments)),
        )

    console.print(table)


@contract.command(name="list")
@click.option("--from-index", default=0, show_default=True, help="Offset of the first record")
@click.option("--limit", default=10, show_default=True, help="Records per page")
@pass_settings
def list_contracts(settings: _Settings, from_index: int, limit: int):
    """List registered contracts."""
    reg = settings.registry()
    page = _run(lambda: reg.get_contracts(from_index, limit))
    _print_page(page, "Contracts", from_index, limit)


@contract.command()
@click.argument("key")
@click.option("--from-index", default=0, show_default=True, help="Offset of the first match")
@click.option("--limit", default=10, show_default=True, help="Matches per page")
@pass_settings
def search(settings: _Settings, key: str, from_index: int, limit: int):
    """Search contracts by account id (network suffixes are ignored)."""
    reg = settings.registry()
    page = _run(lambda: reg.search(key, from_index, limit))
    _print_page(page, f"Search '{key}'", from_index, limit)


# ── Engagement ───────────────────────────────────────────────────────


@main.command()
@click.argument("account_id")
@click.argument("kind", type=click.Choice(["upvote", "downvote"]))
@pass_settings
def vote(settings: _Settings, account_id: str, kind: str):
    """Vote on ACCOUNT_ID's contract; a second vote replaces the first."""
    caller = settings.require_caller()
    reg = settings.registry()
    _run(lambda: reg.vote(caller, account_id, kind))
    console.print(f"  [cyan]{caller}[/] voted {kind} on {account_id}")


@main.group()
def comment():
    """Discuss registered contracts."""


@comment.command(name="add")
@click.argument("account_id")
@click.argument("text")
@pass_settings
def comment_add(settings: _Settings, account_id: str, text: str):
    """Comment on ACCOUNT_ID's contract."""
    caller = settings.require_caller()
    reg = settings.registry()
    c = _run(lambda: reg.add_comment(caller, account_id, text))
    console.print(f"  Comment [cyan]#{c.id}[/] added to {account_id}")


@comment.command()
@click.argument("comment_id", type=int)
@click.argument("text")
@pass_settings
def reply(settings: _Settings, comment_id: int, text: str):
    """Reply to comment COMMENT_ID."""
    caller = settings.require_caller()
    reg = settings.registry()
    c = _run(lambda: reg.reply_to_comment(caller, comment_id, text))
    console.print(f"  Comment [cyan]#{c.id}[/] added in reply to #{comment_id}")


@comment.command()
@click.argument("comment_id", type=int)
@pass_settings
def like(settings: _Settings, comment_id: int):
    """Like comment COMMENT_ID."""
    caller = settings.require_caller()
    reg = settings.registry()
    _run(lambda: reg.like_comment(caller, comment_id))
    console.print(f"  [cyan]{caller}[/] liked comment #{comment_id}")


@comment.command(name="list")
@click.argument("account_id")
@pass_settings
def comment_list(settings: _Settings, account_id: str):
    """List the comments on ACCOUNT_ID's contract."""
    reg = settings.registry()
    comments = _run(lambda: reg.get_comments(account_id))
    if not comments:
        console.print("[yellow]No comments.[/]")
        return

    for c in comments:
        console.print(
            f"  [cyan]#{c.id}[/] {c.author_id} [dim]{_fmt_ts(c.timestamp)}[/] "
            f"({len(c.likes)} likes, {len(c.replies)} replies)"
        )
        console.print(f"    {escape(c.description)}")


# ── Audit ────────────────────────────────────────────────────────────


@main.command()
@click.option("--actor", default=None, help="Only events by this caller")
@click.option("--limit", default=50, show_default=True, help="Maximum number of events")
@pass_settings
def audit(settings: _Settings, actor: str | None, limit: int):
    """Show recent registry events, newest first."""
    from sourcescan.security.audit_log import AuditLogger

    events = AuditLogger(settings.audit_dir).get_events(actor=actor, limit=limit)
    if not events:
        console.print("[yellow]No events recorded.[/]")
        return

    table = Table(title=f"Audit log ({len(events)} events)")
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Actor", style="cyan", no_wrap=True)
    table.add_column("Action", no_wrap=True)
    table.add_column("Message")
    for e in events:
        table.add_row(e.timestamp[:19], e.actor, e.action, e.message)
    console.print(table)


if __name__ == "__main__":
    main()
