"""Seed script: creates sample knowledge articles via the REST API.

Tokens for the demo principals are minted locally with the same JWT_SECRET
the server uses, so run it with the server's environment.

Usage:
    python scripts/seed.py              # uses http://localhost:8000
    python scripts/seed.py http://host  # custom base URL
"""

import sys

import httpx

from auth.application.services import create_access_token
from auth.domain.entities import Principal, Role

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

PRINCIPALS = {
    "reader": Principal(id="reader-001", display_name="Riley Reader", role=Role.READER),
    "actor": Principal(id="actor-001", display_name="Alex Actor", role=Role.ACTOR),
    "author": Principal(id="author-001", display_name="Avery Author", role=Role.AUTHOR),
    "editor": Principal(id="editor-001", display_name="Elliot Editor", role=Role.EDITOR),
}

ARTICLES = [
    {
        "title": "Resetting a locked Active Directory account",
        "body": "1. Open AD Users and Computers.\n2. Find the account.\n3. Unlock it.",
        "category": "Service Request",
        "tags": ["active-directory", "password"],
        "publish": True,
    },
    {
        "title": "VPN drops every few minutes",
        "body": "Check the client version first, then the MTU setting on the adapter.",
        "category": "Network",
        "tags": ["vpn", "connectivity"],
        "publish": True,
    },
    {
        "title": "Major incident bridge checklist",
        "body": "Open the bridge, assign a scribe, post status every 30 minutes.",
        "category": "Incident Resolution",
        "tags": ["major-incident", "process"],
        "publish": False,
    },
]


def headers(role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(PRINCIPALS[role])}"}


def create_article(client: httpx.Client, article: dict) -> str:
    payload = {k: v for k, v in article.items() if k != "publish"}
    resp = client.post(f"{BASE_URL}/api/articles", json=payload, headers=headers("author"))
    resp.raise_for_status()
    article_id = resp.json()["id"]
    print(f"  Created '{article['title']}' ({article_id})")
    return article_id


def publish(client: httpx.Client, article_id: str) -> None:
    resp = client.post(f"{BASE_URL}/api/articles/{article_id}/publish", headers=headers("author"))
    resp.raise_for_status()
    print(f"  Published {article_id}")


def comment(client: httpx.Client, article_id: str, content: str) -> None:
    resp = client.post(
        f"{BASE_URL}/api/articles/{article_id}/comments",
        json={"content": content},
        headers=headers("actor"),
    )
    resp.raise_for_status()


def main() -> None:
    print(f"Seeding against {BASE_URL}\n")

    with httpx.Client(timeout=10) as client:
        print("Articles:")
        published: list[str] = []
        for article in ARTICLES:
            article_id = create_article(client, article)
            if article["publish"]:
                publish(client, article_id)
                published.append(article_id)

        print("\nComments:")
        for article_id in published:
            comment(client, article_id, "This fixed it for me, thanks!")
            print(f"  Commented on {article_id}")

    print("\nDone! Demo principals:")
    for role, principal in PRINCIPALS.items():
        print(f"  {role:<7} {principal.id}  ({principal.display_name})")


if __name__ == "__main__":
    main()
