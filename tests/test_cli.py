"""Tests for CLI commands."""

import json

from ledgerkit.cli.main import cli


def invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


class TestCustomerCommands:
    """Tests for customer commands."""

    def test_add_and_list(self, cli_runner, temp_db):
        """Test adding and listing customers."""
        result = invoke(cli_runner, temp_db, "customer", "add", "Acme")
        assert result.exit_code == 0
        assert "Created customer 'Acme' (ID: 1)" in result.output

        result = invoke(cli_runner, temp_db, "customer", "list")
        assert result.exit_code == 0
        assert "1: Acme" in result.output

    def test_empty_list(self, cli_runner, temp_db):
        """Test listing with no customers."""
        result = invoke(cli_runner, temp_db, "customer", "list")
        assert result.exit_code == 0
        assert "No customers found" in result.output

    def test_duplicate(self, cli_runner, temp_db):
        """Test adding a duplicate customer fails."""
        invoke(cli_runner, temp_db, "customer", "add", "Acme")
        result = invoke(cli_runner, temp_db, "customer", "add", "Acme")
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestSaleCommands:
    """Tests for recording and showing sales."""

    def test_record_and_show(self, cli_runner, temp_db):
        """Test recording a sale with tax and showing it."""
        invoke(cli_runner, temp_db, "customer", "add", "Acme")
        result = invoke(
            cli_runner, temp_db, "sale", "record", "--customer", "Acme", "--line", "400=100", "--tax", "au:gst:10"
        )
        assert result.exit_code == 0, result.output
        assert "Saved sale 1 (total USD 110.00)" in result.output

        result = invoke(cli_runner, temp_db, "show", "1")
        assert result.exit_code == 0
        assert "Sale 1" in result.output
        assert "Customer: Acme" in result.output
        assert "au:gst:10" in result.output
        assert "110.00" in result.output

    def test_show_json_and_edit(self, cli_runner, temp_db, tmp_path):
        """Test form values exported as JSON can be edited and saved back."""
        invoke(cli_runner, temp_db, "customer", "add", "Acme")
        invoke(cli_runner, temp_db, "sale", "record", "--customer", "1", "--line", "400=100", "--line", "401=50")

        result = invoke(cli_runner, temp_db, "show", "1", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["type"] == "sale"
        assert [line["amount"] for line in data["elements"]] == ["100.00", "50.00"]

        data["elements"][1]["amount"] = "25"
        form_file = tmp_path / "form.json"
        form_file.write_text(json.dumps(data))
        result = invoke(cli_runner, temp_db, "sale", "record", "--id", "1", "--json", str(form_file))
        assert result.exit_code == 0, result.output
        assert "Saved sale 1 (total USD 125.00)" in result.output

    def test_record_requires_customer(self, cli_runner, temp_db):
        """Test validation errors are reported per field."""
        result = invoke(cli_runner, temp_db, "sale", "record", "--line", "400=100")
        assert result.exit_code == 1
        assert "actor_id: Customer is required" in result.output

    def test_unknown_customer(self, cli_runner, temp_db):
        """Test an unknown customer name fails."""
        result = invoke(cli_runner, temp_db, "sale", "record", "--customer", "Nobody", "--line", "400=1")
        assert result.exit_code == 1
        assert "Customer 'Nobody' not found" in result.output

    def test_bad_line(self, cli_runner, temp_db):
        """Test a malformed --line value is rejected."""
        result = invoke(cli_runner, temp_db, "sale", "record", "--customer", "1", "--line", "sales")
        assert result.exit_code != 0
        assert "ACCOUNT=AMOUNT" in result.output

    def test_show_missing(self, cli_runner, temp_db):
        """Test showing an unknown transaction fails."""
        result = invoke(cli_runner, temp_db, "show", "9")
        assert result.exit_code == 1
        assert "Transaction 9 not found" in result.output


class TestPaymentCommands:
    """Tests for invoice payments."""

    def record_invoice(self, cli_runner, temp_db):
        return invoke(
            cli_runner,
            temp_db,
            "sale",
            "record",
            "--type",
            "invoice",
            "--new-customer",
            "Bob",
            "--line",
            "400=110",
            "--gross",
            "--tax-rate",
            "10",
        )

    def test_invoice_pay_and_balance(self, cli_runner, temp_db):
        """Test paying part of an invoice and checking the balance."""
        result = self.record_invoice(cli_runner, temp_db)
        assert result.exit_code == 0, result.output
        assert "Saved invoice 1 (total USD 110.00)" in result.output

        result = invoke(cli_runner, temp_db, "show", "1")
        assert "Customer: Bob" in result.output
        assert "::10" in result.output

        result = invoke(cli_runner, temp_db, "pay", "1", "--amount", "50", "--description", "deposit")
        assert result.exit_code == 0, result.output
        assert "Recorded payment 2 against invoice 1" in result.output
        assert "Balance: USD -60.00" in result.output

        result = invoke(cli_runner, temp_db, "balance", "1")
        assert result.exit_code == 0
        assert "deposit" in result.output
        assert "Balance: USD -60.00" in result.output

        result = invoke(cli_runner, temp_db, "pay", "1", "--amount", "110", "--payment", "2")
        assert result.exit_code == 0, result.output
        assert "Balance: USD 0.00" in result.output

    def test_pay_sale_fails(self, cli_runner, temp_db):
        """Test payments are only taken against invoices."""
        invoke(cli_runner, temp_db, "customer", "add", "Acme")
        invoke(cli_runner, temp_db, "sale", "record", "--customer", "Acme", "--line", "400=10")
        result = invoke(cli_runner, temp_db, "pay", "1", "--amount", "5")
        assert result.exit_code == 1
        assert "not an invoice" in result.output

    def test_pay_invalid_amount(self, cli_runner, temp_db):
        """Test a malformed payment amount is reported."""
        self.record_invoice(cli_runner, temp_db)
        result = invoke(cli_runner, temp_db, "pay", "1", "--amount", "lots")
        assert result.exit_code == 1
        assert "Invalid amount" in result.output

    def test_balance_without_payments(self, cli_runner, temp_db):
        """Test the balance of an unpaid invoice."""
        self.record_invoice(cli_runner, temp_db)
        result = invoke(cli_runner, temp_db, "balance", "1")
        assert "No payments recorded." in result.output
        assert "Balance: USD -110.00" in result.output


def test_taxcodes(cli_runner, temp_db):
    """Test listing tax codes."""
    result = invoke(cli_runner, temp_db, "taxcodes")
    assert result.exit_code == 0
    assert "au:gst:10" in result.output
    assert "Australia GST" in result.output
    assert "variable" in result.output


def test_config_file(cli_runner, temp_db, tmp_path):
    """Test --config changes the default currency."""
    config_file = tmp_path / "ledgerkit.toml"
    config_file.write_text('default_currency = "JPY"\n')
    invoke(cli_runner, temp_db, "customer", "add", "Acme")
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "--config", str(config_file), "sale", "record", "--customer", "Acme", "--line", "400=1500"],
    )
    assert result.exit_code == 0, result.output
    assert "total JPY 1500" in result.output
