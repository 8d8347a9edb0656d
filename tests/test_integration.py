"""Integration tests for complete workflows."""

from parkledger.cli.main import cli


def test_full_workflow(cli_runner, temp_db):
    """Test complete workflow: init → submit → entry → balance → reverse → trial balance."""
    db_args = ["--db-path", temp_db.database_path]

    # Step 1: Initialize chart of accounts and settings
    result = cli_runner.invoke(cli, db_args + ["init"])
    assert result.exit_code == 0

    # Step 2: A concession pays its monthly fee
    result = cli_runner.invoke(
        cli,
        db_args + [
            "submit",
            "--module", "concessions",
            "--source-id", "CF-2024-03",
            "--type", "income",
            "--amount", "1500",
            "--date", "2024-03-31",
            "--description", "Cuota de concesión marzo",
        ],
    )
    assert result.exit_code == 0
    assert "AST-2024-03-0001" in result.output

    # Step 3: The concession transfers the receivable to cash
    result = cli_runner.invoke(
        cli,
        db_args + [
            "submit",
            "--module", "concessions",
            "--source-id", "CF-2024-03-PAY",
            "--type", "transfer",
            "--amount", "1500",
            "--date", "2024-03-31",
            "--description", "Cobro de cuota",
        ],
    )
    assert result.exit_code == 0

    # Step 4: A manual maintenance entry
    result = cli_runner.invoke(
        cli,
        db_args + [
            "entry", "create",
            "--date", "2024-03-15",
            "--description", "Pintura de bancas",
            "--line", "F-1-3:400:0",
            "--line", "A-1-1:0:400",
            "--post",
        ],
    )
    assert result.exit_code == 0
    assert "status: posted" in result.output

    # Step 5: Balances
    result = cli_runner.invoke(cli, db_args + ["balance", "show", "A-1-1", "2024-03"])
    assert result.exit_code == 0
    assert "1,100.00" in result.output

    result = cli_runner.invoke(cli, db_args + ["balance", "rollup", "A-1", "2024-03"])
    assert result.exit_code == 0
    assert "1,100.00" in result.output

    # Step 6: Reverse the maintenance entry
    result = cli_runner.invoke(cli, db_args + ["entry", "reverse", "3"])
    assert result.exit_code == 0
    assert "AST-2024-03-0004" in result.output

    # Step 7: Trial balance stays balanced
    result = cli_runner.invoke(cli, db_args + ["balance", "trial", "2024-03"])
    assert result.exit_code == 0
    assert "Warning" not in result.output
    assert "D-1-2" in result.output
    assert "3,800.00" in result.output

    result = cli_runner.invoke(cli, db_args + ["entry", "list", "--period", "2024-03"])
    assert result.exit_code == 0
    assert result.output.count("posted") == 4
