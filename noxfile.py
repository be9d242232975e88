import nox

nox.options.default_venv_backend = "uv"


@nox.session
@nox.parametrize("python", ["3.11", "3.12", "3.13"])
def tests(session: nox.Session):
    """Run the test suite against an installed copy of the package."""
    session.install("-e", ".[test]")
    session.run("pytest", *session.posargs)
