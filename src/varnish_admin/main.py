# src/varnish_admin/main.py
"""
varnish-admin 命令行入口 (Click)。

配置来源 (按优先级):
1. --config 指定的 TOML 文件 (可配合 --profile)。
2. 当前目录下的 .env 文件 (若存在) + VARNISH_ 前缀的环境变量。
"""

import logging
from collections.abc import Callable
from pathlib import Path

import click

from . import __version__
from .config import VarnishAdminConfig, load_config_from_env, load_config_from_toml
from .core import VarnishAdmin
from .exceptions import VarnishAdminError

logger = logging.getLogger("VarnishAdminCLI")

# Child 未运行时 status 子命令的退出码
EXIT_STOPPED = 3
EXIT_ERROR = 1


def load_cli_config(config_path: Path | None, profile: str) -> VarnishAdminConfig:
    """为 CLI 加载配置。"""
    if config_path is not None:
        logger.debug(f"使用配置文件: {config_path}")
        return load_config_from_toml(config_path, profile)

    env_path = Path.cwd() / ".env"
    return load_config_from_env(env_path if env_path.exists() else None)


def _run(ctx: click.Context, action: Callable[[VarnishAdmin], int | None]) -> None:
    """连接、执行单条动作并优雅退出；库异常转换为退出码 1。"""
    try:
        config = load_cli_config(ctx.obj["config"], ctx.obj["profile"])
        logger.debug(f"配置加载完成: {config!r}")
        with VarnishAdmin.from_config(config) as admin:
            code = action(admin)
    except VarnishAdminError as e:
        logger.error(f"{type(e).__name__}: {e}")
        ctx.exit(EXIT_ERROR)
    ctx.exit(code or 0)


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML 配置文件路径。",
)
@click.option("--profile", default="default", help="TOML 中的预设名。")
@click.option("-v", "--verbose", is_flag=True, default=False, help="输出调试日志。")
@click.version_option(version=__version__, prog_name="varnish-admin")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, profile: str, verbose: bool) -> None:
    """Varnish 管理端口客户端。"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config_path
    ctx.obj["profile"] = profile


@cli.command()
@click.pass_context
def banner(ctx: click.Context) -> None:
    """连接并打印 Banner。"""

    def action(admin: VarnishAdmin) -> None:
        click.echo(admin.session.banner if admin.session else "")

    _run(ctx, action)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """查询 Child 是否运行 (未运行时退出码为 3)。"""

    def action(admin: VarnishAdmin) -> int:
        running = admin.status()
        click.echo("running" if running else "stopped")
        return 0 if running else EXIT_STOPPED

    _run(ctx, action)


@cli.command()
@click.pass_context
def start(ctx: click.Context) -> None:
    """启动 Child。"""

    def action(admin: VarnishAdmin) -> None:
        admin.start()

    _run(ctx, action)


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """停止 Child。"""

    def action(admin: VarnishAdmin) -> None:
        admin.stop()

    _run(ctx, action)


@cli.command()
@click.argument("expr", nargs=-1, required=True)
@click.pass_context
def purge(ctx: click.Context, expr: tuple[str, ...]) -> None:
    """按表达式 ban，如: purge req.url "~" ^/news"""

    def action(admin: VarnishAdmin) -> None:
        click.echo(admin.purge(" ".join(expr)) or "")

    _run(ctx, action)


@cli.command("purge-url")
@click.argument("url")
@click.pass_context
def purge_url(ctx: click.Context, url: str) -> None:
    """按 URL (正则) ban。"""

    def action(admin: VarnishAdmin) -> None:
        click.echo(admin.purge_url(url) or "")

    _run(ctx, action)


if __name__ == "__main__":
    cli()
