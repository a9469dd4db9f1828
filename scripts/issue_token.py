# scripts/issue_token.py
"""Print a bearer token for local testing, signed like the identity provider's."""
import argparse
import sys
from pathlib import Path

# Add the parent directory to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from habitflow.core.security import create_access_token


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("subject", help="identity provider user id")
    parser.add_argument("--email")
    parser.add_argument("--first-name")
    parser.add_argument("--last-name")
    args = parser.parse_args()

    claims = {
        key: value
        for key, value in (
            ("email", args.email),
            ("first_name", args.first_name),
            ("last_name", args.last_name),
        )
        if value
    }
    print(create_access_token(args.subject, extra_claims=claims))
    sys.stdout.flush()


if __name__ == "__main__":
    main()
