"""Display functions for registry commands."""

from rich import box
from rich.table import Table
from rich.text import Text

from cli.core.context import Context
from valhalla.security.navigation import Navigation
from valhalla.security.roles import Role, role_name

FLAG_COLUMNS = (('can_view', 'V'), ('can_create', 'C'), ('can_edit', 'E'), ('can_delete', 'D'))


def _flags(permissions) -> Text:
    text = Text()
    for attr, letter in FLAG_COLUMNS:
        if getattr(permissions, attr):
            text.append(letter, style="green bold")
        else:
            text.append("-", style="dim")
    return text


def display_feature_table(ctx: Context, features, roles=None):
    """Permission matrix: one row per feature, one column per role."""
    roles = list(roles) if roles else [int(role) for role in Role]

    table = Table(title="Feature registry", box=box.SIMPLE)
    table.add_column("Key", style="cyan")
    table.add_column("Path")
    table.add_column("Group", style="dim")
    table.add_column("Order", justify="right")
    for role_id in roles:
        table.add_column(role_name(role_id) or f"role {role_id}", justify="center")

    for feature in features:
        table.add_row(
            feature.key,
            feature.app_path or '',
            feature.group or '',
            '' if feature.order is None else str(feature.order),
            *[_flags(feature.permissions_for(role_id)) for role_id in roles],
        )

    ctx.console.print(table)
    ctx.console.print("V=view C=create E=edit D=delete", style="dim")


def display_navigation(ctx: Context, navigation: Navigation):
    """Sidebar, dashboard cards, quick access and landing page of one role."""
    title = navigation.role_name or f"role {navigation.role_id}"
    ctx.console.print(f"[bold]{title}[/bold] ({navigation.role_key or 'no role'})")
    ctx.console.print(f"Default path: [green]{navigation.default_path}[/green]\n")

    sidebar = Table(title="Sidebar", box=box.SIMPLE)
    sidebar.add_column("Group", style="dim")
    sidebar.add_column("Label", style="cyan")
    sidebar.add_column("Path")
    for group, items in navigation.sidebar_groups():
        for item in items:
            sidebar.add_row(group or '', item.label, item.path)
    ctx.console.print(sidebar)

    for title, features in (("Dashboard cards", navigation.dashboard_cards),
                            ("Quick access", navigation.quick_access)):
        table = Table(title=title, box=box.SIMPLE)
        table.add_column("Order", justify="right")
        table.add_column("Label", style="cyan")
        table.add_column("Path")
        for feature in features:
            table.add_row('' if feature.order is None else str(feature.order),
                          feature.label or feature.key, feature.app_path or '')
        ctx.console.print(table)
