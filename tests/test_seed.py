"""
Tests for demo data seeding and the shared ledger dependency
"""

from decimal import Decimal

from account_service import config as config_module
from account_service.api import dependencies
from account_service.ledger import Ledger
from account_service.seed import seed_demo_data
from account_service.transactions import net_amount


class TestSeedDemoData:

    def test_seeded_accounts_are_consistent(self):
        ledger = Ledger()
        ids = seed_demo_data(ledger, owner_id="demo-owner")

        checking = ledger.get_account(ids["checking_account_id"])
        deposit = ledger.get_account(ids["deposit_account_id"])

        assert checking.balance == Decimal("800")
        assert deposit.balance == Decimal("200")
        assert deposit.interest_rate == Decimal("3.0")
        assert ledger.account_exists(checking.id, "demo-owner")
        for account in (checking, deposit):
            assert account.balance == net_amount(ledger.get_account_transactions(account.id))


class TestLedgerDependency:

    def teardown_method(self):
        dependencies.reset_ledger()

    def test_shared_ledger_is_created_once(self, monkeypatch):
        monkeypatch.setattr(config_module.config, "seed_demo_data", False)
        dependencies.reset_ledger()

        first = dependencies.get_ledger()
        assert dependencies.get_ledger() is first
        assert first.list_accounts() == []

    def test_shared_ledger_seeded_when_configured(self, monkeypatch):
        monkeypatch.setattr(config_module.config, "seed_demo_data", True)
        dependencies.reset_ledger()

        assert len(dependencies.get_ledger().list_accounts()) == 2
