"""Input validation for CLI arguments."""
import re
import sys

EXIT_USAGE_ERROR = 1


def validate_project_id(project_id: str, role: str = "project") -> None:
    """
    Validate project ID matches GCP requirements.

    GCP project IDs are 6-30 characters: lowercase letters, digits and
    hyphens, starting with a letter and not ending with a hyphen.

    Args:
        project_id: Project ID to validate
        role: "source" or "destination", used in the error message

    Raises:
        SystemExit with code 1 if validation fails
    """
    if not project_id:
        print(f"Error: {role.capitalize()} project ID cannot be empty", file=sys.stderr)
        sys.exit(EXIT_USAGE_ERROR)

    pattern = r'^[a-z][a-z0-9-]{4,28}[a-z0-9]$'

    if not re.match(pattern, project_id):
        print(f"Error: Invalid {role} project ID '{project_id}'", file=sys.stderr)
        print("\nProject IDs must:", file=sys.stderr)
        print("  - be 6 to 30 characters long", file=sys.stderr)
        print("  - start with a lowercase letter", file=sys.stderr)
        print("  - contain only lowercase letters, digits and hyphens (-)", file=sys.stderr)
        print("  - not end with a hyphen", file=sys.stderr)
        print("\nExamples of valid IDs:", file=sys.stderr)
        print("  ✓ my-prod-project", file=sys.stderr)
        print("  ✓ acme-secrets-2024", file=sys.stderr)
        print("\nExamples of invalid IDs:", file=sys.stderr)
        print("  ✗ My-Project (uppercase)", file=sys.stderr)
        print("  ✗ proj (too short)", file=sys.stderr)
        print("  ✗ 1project (starts with a digit)", file=sys.stderr)
        sys.exit(EXIT_USAGE_ERROR)


def validate_distinct_projects(source_project: str, destination_project: str) -> None:
    """
    Validate source and destination are different projects.

    Raises:
        SystemExit with code 1 if both are the same
    """
    if source_project == destination_project:
        print(
            f"Error: Source and destination project are both '{source_project}'",
            file=sys.stderr,
        )
        print("\nReplicating a project onto itself would duplicate every version.", file=sys.stderr)
        sys.exit(EXIT_USAGE_ERROR)
