import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

TEST_LAYERS = {
    "domain": "tests/inventory/domain/",
    "application": "tests/inventory/application/",
    "integration": "tests/inventory/integration/",
    "bdd": "tests/inventory/bdd/",
}


def _install(session: nox.Session) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", TEST_LAYERS["domain"], *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_layer(session: nox.Session) -> None:
    """Run one test layer: ``nox -s tests_layer -- application``."""
    layer = session.posargs[0] if session.posargs else "domain"
    if layer not in TEST_LAYERS:
        session.error(f"Unknown layer {layer!r}; choose from {', '.join(TEST_LAYERS)}")
    _install(session)
    session.run("pytest", TEST_LAYERS[layer], *session.posargs[1:])


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_postgres(session: nox.Session) -> None:
    """Run the suite against PostgreSQL (needs DATABASE_URL)."""
    session.install("-e", ".[test,postgres]")
    session.run("pytest", "--env", "production", *session.posargs)
