"""
Command Line Interface for the Strategic Planning backend.
"""

from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..auth.guard import Actor
from ..auth.passwords import hash_password
from ..auth.permissions import MATRIX_ACTIONS, Resource, Role, permissions_for
from ..config import get_settings
from ..db.base import get_session_local, init_database
from ..db.models import StrategicIssueModel, StrategyModel, UserModel
from ..logging_config import configure_logging
from ..records.services import StrategicIssueService, StrategyService
from ..records.strategic_issue import StrategicIssueCreate
from ..records.strategy import StrategyCreate

app = typer.Typer(help="Strategic Planning backend - records for issues, strategies and projects")
console = Console()

DEFAULT_USERS = [
    {
        "email": "admin@ypr.local",
        "password": "admin123",
        "role": Role.ADMIN.value,
        "title_prefix": "Dr.",
        "first_name": "System",
        "last_name": "Administrator",
        "position": "Administrator",
        "department": "IT Department",
    },
    {
        "email": "dept@ypr.local",
        "password": "dept123",
        "role": Role.DEPARTMENT.value,
        "title_prefix": "Mr.",
        "first_name": "Somchai",
        "last_name": "Jaidee",
        "position": "Head of Section",
        "department": "Strategy Section",
    },
]

SAMPLE_ISSUES = [
    {
        "title": "Sustainable human resource development",
        "description": "Build staff knowledge, skills and capacity in step with a changing world.",
        "start_year": 2567,
        "end_year": 2571,
        "strategies": [
            "Digital skills training for staff",
            "Continuous learning and development platform",
        ],
    },
    {
        "title": "Innovation and digital technology",
        "description": "Use digital technology and innovation to raise service efficiency.",
        "start_year": 2568,
        "end_year": 2573,
        "strategies": ["Digital knowledge management system"],
    },
    {
        "title": "Strategic partnerships",
        "description": "Grow cooperation networks across public, private and civil sectors.",
        "start_year": 2567,
        "end_year": 2570,
        "strategies": ["Innovation partnership network"],
    },
]


def _ensure_user(db, data: dict) -> UserModel:
    user = db.query(UserModel).filter(UserModel.email == data["email"]).first()
    if user is not None:
        console.print(f"[yellow]User already exists:[/yellow] {data['email']}")
        return user

    values = {k: v for k, v in data.items() if k != "password"}
    user = UserModel(**values, password_hash=hash_password(data["password"]))
    db.add(user)
    db.commit()
    db.refresh(user)
    console.print(f"[green]Created user:[/green] {user.email} ({user.role})")
    return user


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    rprint(Panel.fit(f"Starting Strategic Planning backend on http://{host}:{port}", style="bold blue"))
    uvicorn.run(
        "strategic_planning.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1 if reload else settings.api_workers,
    )


@app.command("init-db")
def init_db():
    """Create all tables."""
    configure_logging()
    init_database()
    console.print("[green]Database initialized[/green]")


@app.command()
def seed(
    samples: bool = typer.Option(True, help="Also create sample strategic issues and strategies"),
):
    """Create the default accounts (and sample records). Safe to run twice."""
    configure_logging()
    init_database()

    db = get_session_local()()
    try:
        users = [_ensure_user(db, data) for data in DEFAULT_USERS]
        if not samples:
            return

        if db.query(StrategicIssueModel).count() > 0:
            console.print("[yellow]Strategic issues already exist, skipping samples[/yellow]")
            return

        admin = users[0]
        actor = Actor(id=admin.id, role=admin.role, department=admin.department, email=admin.email)
        issues = StrategicIssueService(db)
        strategies = StrategyService(db)
        for sample in SAMPLE_ISSUES:
            fields = {k: v for k, v in sample.items() if k != "strategies"}
            issue = issues.create(actor, StrategicIssueCreate(**fields))
            for name in sample["strategies"]:
                strategies.create(
                    actor, StrategyCreate(strategic_issue_id=issue.id, name=name)
                )

        console.print(
            f"[green]Created {len(SAMPLE_ISSUES)} strategic issues and "
            f"{db.query(StrategyModel).count()} strategies[/green]"
        )
    finally:
        db.close()


@app.command("create-user")
def create_user(
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password"),
    first_name: str = typer.Option(..., help="First name"),
    last_name: str = typer.Option(..., help="Last name"),
    role: Role = typer.Option(Role.DEPARTMENT, help="Account role"),
    department: Optional[str] = typer.Option(None, help="Department name"),
    position: Optional[str] = typer.Option(None, help="Position"),
):
    """Create a user account directly in the database."""
    settings = get_settings()
    if len(password) < settings.min_password_length:
        console.print(
            f"[red]Password must be at least {settings.min_password_length} characters[/red]"
        )
        raise typer.Exit(code=1)

    configure_logging()
    init_database()
    db = get_session_local()()
    try:
        email = email.strip().lower()
        if db.query(UserModel).filter(UserModel.email == email).first() is not None:
            console.print(f"[red]Email already registered:[/red] {email}")
            raise typer.Exit(code=1)
        _ensure_user(
            db,
            {
                "email": email,
                "password": password,
                "role": role.value,
                "first_name": first_name,
                "last_name": last_name,
                "department": department,
                "position": position,
            },
        )
    finally:
        db.close()


@app.command()
def permissions():
    """Print the role permission matrix."""
    table = Table(title="Permission Matrix", show_header=True, header_style="bold magenta")
    table.add_column("Resource", style="cyan")
    for role in Role:
        table.add_column(role.value, style="green")

    granted = {role: permissions_for(role) for role in Role}
    for resource in Resource:
        row = [resource.value]
        for role in Role:
            row.append(", ".join(granted[role].get(resource.value, [])) or "-")
        table.add_row(*row)

    console.print(table)
    console.print(
        f"Actions checked against the matrix: {', '.join(sorted(a.value for a in MATRIX_ACTIONS))}"
    )


if __name__ == "__main__":
    app()
