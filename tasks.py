# type: ignore
from invoke import task


@task
def venv(ctx):
    """Initialize development environment with uv."""
    print("Initializing development environment with uv...")

    # creates .venv and installs gearlink with its extras
    ctx.run("uv sync --all-extras")


@task
def clean(ctx):
    """Remove build output, caches and coverage data."""
    ctx.run("rm -rf dist build .pytest_cache .mypy_cache .ruff_cache .coverage")
    ctx.run("find . -name __pycache__ -type d -prune -exec rm -rf {} +")


@task
def lint(ctx):
    """Run ruff and mypy over the package and the tests."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """Run tests with coverage for the gearlink package."""
    ctx.run("pytest --cov=gearlink --cov-report=term-missing", pty=True)


@task
def demo(ctx, events=True):
    """Walk the simulated backend through a scan, connect and pair cycle."""
    flag = " --events" if events else ""
    ctx.run(f"gearlink scan{flag}", pty=True)
    ctx.run(f"gearlink connect usb-drums{flag}", pty=True)
    ctx.run(f"gearlink bluetooth status{flag}", pty=True)
    ctx.run(f"gearlink bluetooth scan{flag}", pty=True)
    ctx.run(f"gearlink bluetooth pair AA:BB:CC:00:00:01 --redact{flag}", pty=True)


@task
def build_package(ctx):
    """Build sdist and wheel using uv."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")
