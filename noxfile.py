import nox


@nox.session
def format(session):
    session.install("-r", "requirements.dev.txt")

    session.run("black", ".")
    session.run("isort", ".")


@nox.session
def lint(session):
    session.install("-r", "requirements.dev.txt")
    session.install(".")

    session.run("pylint", "ibdpair")
    session.run("pylint", "tests")


@nox.session
def test(session):
    session.install("-r", "requirements.dev.txt")
    session.install(".")

    session.run("pytest", *session.posargs)


@nox.session
def test_no_jit(session):
    session.install("-r", "requirements.dev.txt")
    session.install(".")

    session.run("pytest", *session.posargs, env={"IBDPAIR_ENABLE_NUMBA": "0"})


@nox.session
def pip_compile(session):
    session.install("pip-tools")

    session.run("pip-compile", *session.posargs)


nox.options.sessions = ["format", "lint", "test"]
