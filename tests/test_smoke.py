"""Smoke tests to verify basic setup."""


def test_import_package() -> None:
    """Verify the package can be imported."""
    import student_intake

    assert student_intake.__version__ == "0.1.0"


def test_project_structure(project_root) -> None:
    """Verify expected directories exist."""
    assert (project_root / "student_intake").is_dir()
    assert (project_root / "tests").is_dir()
    assert (project_root / "pyproject.toml").is_file()
