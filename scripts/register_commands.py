"""
Discord slash command registration

Registers /report, /lookup and /support for the application.
Run with: python scripts/register_commands.py [--guild GUILD_ID]

Notes:
- Overwrites the whole command set (bulk PUT), so removed commands disappear
- Guild registration applies instantly and is meant for testing
- Needs DISCORD_BOT_TOKEN and DISCORD_APPLICATION_ID (env or .env)
"""

import argparse
import logging
import sys

import httpx

from compat_api.core.config import get_settings
from compat_api.services.interaction_service import build_command_definitions

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("register_commands")

DISCORD_API_URL = "https://discord.com/api/v10"


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--guild", help="Register for one guild instead of globally")
    args = parser.parse_args()

    settings = get_settings()
    if not settings.discord_bot_token or not settings.discord_application_id:
        logger.error("[ERROR] DISCORD_BOT_TOKEN and DISCORD_APPLICATION_ID are required")
        return 1

    url = f"{DISCORD_API_URL}/applications/{settings.discord_application_id}"
    if args.guild:
        url += f"/guilds/{args.guild}"
    url += "/commands"

    commands = build_command_definitions()
    response = httpx.put(
        url,
        json=commands,
        headers={"Authorization": f"Bot {settings.discord_bot_token}"},
        timeout=15.0,
    )
    if response.is_error:
        logger.error(f"[ERROR] {response.status_code} {response.text}")
        return 1

    scope = f"guild {args.guild}" if args.guild else "global"
    logger.info(f"Registered {len(response.json())} {scope} commands:")
    for i, cmd in enumerate(commands, 1):
        logger.info(f"  {i:2d}. /{cmd['name']:10s} - {cmd['description']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
