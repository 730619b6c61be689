"""Banner generation for application."""

import platform
import sys
from datetime import UTC, datetime

from pyfiglet import figlet_format

from taskhub.config.config import Settings

__all__ = ["create_banner"]


def create_banner(settings: Settings, silent: bool = False) -> str:
    """Generate and optionally print a banner with server name and settings.

    Args:
        settings: Application configuration settings
        silent: If True, suppress console output and return banner as string

    Returns:
        The complete banner as a string
    """
    lines: list[str] = []

    banner = figlet_format("TASKHUB", font="slant")
    lines.extend([
        "\033[1;36m" + banner + "\033[0m",
        f"\033[1;33m⚡ TASKHUB Service v{settings.version} ⚡\033[0m",
        f"\033[0;37m{'-' * 60}\033[0m",
    ])

    env_color = "\033[1;31m" if settings.app_env == "production" else "\033[1;32m"
    lines.extend([
        f"🌍 Environment: {env_color}{settings.app_env}\033[0m",
        f"🔌 API: http://{settings.host_binding}:{settings.port}{settings.root_path}",
        f"📋 Docs: http://localhost:{settings.port}/docs",
        f"📊 Metrics: http://localhost:{settings.port}/metrics",
    ])

    lines.extend([
        "\n\033[1;33m💾 Database Configuration\033[0m",
        f"  • Engine: {settings.db_url.split('://')[0]}",
        f"  • Pool Size: {settings.db_pool_size} (max: {settings.db_pool_size + settings.db_max_overflow})",  # noqa: E501
        f"  • Clear on Restart: {'✅' if settings.clear_db_on_restart else '❌'}",
        f"  • Seed on Start: {'✅' if settings.seed_db_on_start else '❌'}",
    ])

    lines.extend([
        "\n\033[1;33m📬 Queue Configuration\033[0m",
        f"  • Broker: {'stub' if settings.app_env == 'testing' else 'redis'}",
        f"  • Queue: {settings.queue_name}",
        f"  • Publish Timeout: {settings.publish_timeout}s",
    ])

    lines.extend([
        "\n\033[1;33m📝 Logging Configuration\033[0m",
        f"  • Log Level: {settings.log_level}",
        f"  • Log Path: {settings.log_path if settings.app_env == 'development' else 'stdout/stderr'}",  # noqa: E501
    ])

    lines.extend([
        "\n\033[1;33m⚙️ System Information\033[0m",
        f"  • OS: {platform.system()} {platform.release()}",
        f"  • Python: {sys.version.split()[0]}",
        f"  • Auto Reload: {'✅' if settings.reload else '❌'}",
        f"  • Started at: {datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S')} UTC",
        f"\033[0;37m{'-' * 60}\033[0m",
    ])

    banner_text = "\n".join(lines)
    if not silent:
        print(banner_text)  # noqa: T201
    return banner_text
