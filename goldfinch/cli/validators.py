"""Input validation for CLI arguments."""
import re
import sys

SECRET_NAME_PATTERN = r'^[a-zA-Z0-9_-]+$'
RESOURCE_NAME_PATTERN = r'^projects/[^/]+/secrets/[a-zA-Z0-9_-]+(/versions/[^/]+)?$'


def validate_secret_name(name: str) -> None:
    """
    Validate a secret identifier given on the command line.

    Accepts a short GCP secret name ([a-zA-Z0-9_-]+) or a full resource
    name (projects/<project>/secrets/<name>[/versions/<version>]).

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Secret name cannot be empty", file=sys.stderr)
        print("\nSecret names must match: [a-zA-Z0-9_-]", file=sys.stderr)
        sys.exit(2)

    if re.match(SECRET_NAME_PATTERN, name) or re.match(RESOURCE_NAME_PATTERN, name):
        return

    print(f"Error: Invalid secret name '{name}'", file=sys.stderr)
    print("\nAllowed characters: letters, numbers, underscores (_), hyphens (-)", file=sys.stderr)
    print("Full resource names are also accepted: projects/<project>/secrets/<name>", file=sys.stderr)
    print("\nExamples of valid names:", file=sys.stderr)
    print("  ✓ my-app-config", file=sys.stderr)
    print("  ✓ DATABASE_URLS", file=sys.stderr)
    print("  ✓ projects/my-project/secrets/api-keys/versions/3", file=sys.stderr)
    print("\nExamples of invalid names:", file=sys.stderr)
    print("  ✗ app.config (contains dot)", file=sys.stderr)
    print("  ✗ MY SECRET (contains space)", file=sys.stderr)
    sys.exit(2)
