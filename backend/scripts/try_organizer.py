#!/usr/bin/env python3
"""
Manual smoke runner for the organizer agent API.

Usage:
    # Chat with the organizer as user 1
    python scripts/try_organizer.py --chat "What should I work on first?"

    # One of the fixed insights
    python scripts/try_organizer.py --insight daily-plan

    # Show the context the model would see
    python scripts/try_organizer.py --context

    # Probe a backend
    python scripts/try_organizer.py --probe --provider openrouter
"""

import argparse
import asyncio
import json
import time
from typing import Any, Dict, Optional

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

console = Console()

INSIGHTS = ["suggestions", "daily-plan", "productivity-analysis", "motivation"]


class OrganizerClient:
    """Thin wrapper over the /api/organizer endpoints."""

    def __init__(self, base_url: str, user_id: str, timeout: float = 60.0):
        self.base_url = base_url.rstrip("/")
        self.headers = {"X-User-Id": user_id}
        self.timeout = timeout

    async def request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        start = time.time()
        async with httpx.AsyncClient(base_url=self.base_url, headers=self.headers, timeout=self.timeout) as client:
            response = await client.request(method, f"/api/organizer{path}", **kwargs)
        duration = round(time.time() - start, 2)

        if response.is_error:
            console.print(f"[bold red]HTTP {response.status_code}[/bold red] in {duration}s")
            console.print(Syntax(json.dumps(response.json(), indent=2), "json", theme="monokai"))
            response.raise_for_status()

        console.print(f"[dim]{method} {path} -> {response.status_code} in {duration}s[/dim]")
        return response.json()


async def show_health(client: OrganizerClient):
    data = await client.request("GET", "/health")
    table = Table(title="Organizer Health")
    table.add_column("Provider", style="cyan")
    table.add_column("Configured")
    for provider, configured in data["providers"].items():
        table.add_row(provider, "[green]yes[/green]" if configured else "[red]no[/red]")
    console.print(table)


async def main():
    parser = argparse.ArgumentParser(description="Exercise the organizer agent API")
    parser.add_argument("--chat", "-c", help="Send a chat message")
    parser.add_argument("--insight", "-i", choices=INSIGHTS, help="Request a fixed insight")
    parser.add_argument("--context", action="store_true", help="Print the formatted context")
    parser.add_argument("--probe", action="store_true", help="Probe the selected AI provider")
    parser.add_argument("--provider", choices=["deepseek", "openrouter"], help="Force a backend")
    parser.add_argument("--url", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--user-id", default="1", help="User id sent in X-User-Id")
    args = parser.parse_args()

    client = OrganizerClient(args.url, args.user_id)
    params: Optional[Dict[str, str]] = {"provider": args.provider} if args.provider else None

    try:
        if args.chat:
            payload: Dict[str, Any] = {"message": args.chat}
            if args.provider:
                payload["provider"] = args.provider
            data = await client.request("POST", "/chat", json=payload)
            console.print(Panel(data["response"], title="Organizer", border_style="white"))
        elif args.insight:
            data = await client.request("GET", f"/{args.insight}", params=params)
            console.print(Panel(data["result"], title=args.insight, border_style="white"))
        elif args.context:
            data = await client.request("GET", "/context")
            console.print(data["formattedContext"])
            console.print(f"\n[bold blue]Stats:[/bold blue] {data['context']['stats']}")
        elif args.probe:
            data = await client.request("GET", "/test-provider", params=params)
            color = "green" if data["status"] == "connected" else "red"
            console.print(f"[bold {color}]{data['provider']}: {data['status']}[/bold {color}]")
            console.print(data.get("response") or "")
        else:
            await show_health(client)
    except httpx.HTTPError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    asyncio.run(main())
