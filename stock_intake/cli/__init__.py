"""CLI commands: one module per area (intake, records, group operations)."""

from typer import Typer

from stock_intake.cli import group_mode, intake_mode, records_mode

app = Typer(help="Warehouse stock intake: whole-box and mixed-box records")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command(name="whole-box")(intake_mode.whole_box)
    app.command(name="mixed-box")(intake_mode.mixed_box)
    app.command()(records_mode.records)
    app.command()(records_mode.pending)
    app.command()(records_mode.group)
    app.command(name="edit-group")(group_mode.edit_group)
    app.command(name="delete-group")(group_mode.delete_group)
    app.command(name="print-group")(group_mode.print_group)


register_commands()
