from pathlib import Path


def get_project_root() -> Path:
    """Get the project root directory.

    Walks up from the working directory, then from the module location, to
    find the project root, identified by the presence of pyproject.toml or a
    config/ directory.

    Returns:
        Path to the project root directory
    """
    for start in (Path.cwd(), Path(__file__).resolve()):
        for parent in [start, *start.parents]:
            if (parent / "pyproject.toml").exists() or (parent / "config").is_dir():
                return parent

    return Path.cwd()
