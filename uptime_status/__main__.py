from uptime_status.main import cli

cli()
