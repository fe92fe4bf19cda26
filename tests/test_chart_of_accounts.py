"""Tests for the chart of accounts service."""

from datetime import date
from decimal import Decimal

import pytest

from pharmledger.domain.chart import ChartOfAccountsService
from pharmledger.domain.documents import ManualEntry, ManualLine
from pharmledger.domain.entities import AccountType, NormalBalance
from pharmledger.domain.errors import NotFoundError, ReferentialIntegrityError, ValidationError


def _post_simple(journal_service, debit_code="6100", credit_code="1110", amount="100000"):
    return journal_service.post(
        ManualEntry(
            manual_date=date(2024, 1, 10),
            lines=(
                ManualLine(account_code=debit_code, debit=Decimal(amount)),
                ManualLine(account_code=credit_code, credit=Decimal(amount)),
            ),
        )
    )


class TestCreateAccount:
    def test_create_root_and_child(self, chart_service):
        header = chart_service.create_account(
            code="1000", name="Assets", account_type="asset", normal_balance="debit", is_header=True
        )
        child = chart_service.create_account(
            code="1110",
            name="Cash",
            account_type="asset",
            normal_balance="debit",
            name_local="Kas",
            account_group="Current Assets",
            parent_id=header.id,
        )

        assert child.parent_id == header.id
        assert child.account_type == AccountType.ASSET
        assert child.normal_balance == NormalBalance.DEBIT
        assert child.name_local == "Kas"
        assert child.is_postable
        assert not header.is_postable

    def test_duplicate_code_rejected(self, chart_service):
        chart_service.create_account(code="1110", name="Cash", account_type="asset", normal_balance="debit")

        with pytest.raises(ValidationError, match="already exists"):
            chart_service.create_account(code="1110", name="Petty Cash", account_type="asset", normal_balance="debit")

    def test_missing_normal_balance_rejected(self, chart_service):
        with pytest.raises(ValidationError):
            chart_service.create_account(code="1110", name="Cash", account_type="asset", normal_balance=None)

    def test_invalid_account_type_rejected(self, chart_service):
        with pytest.raises(ValidationError):
            chart_service.create_account(code="1110", name="Cash", account_type="cash", normal_balance="debit")

    def test_parent_must_exist(self, chart_service):
        with pytest.raises(ValidationError, match="not found"):
            chart_service.create_account(
                code="1110", name="Cash", account_type="asset", normal_balance="debit", parent_id=999
            )

    def test_parent_must_be_header(self, chart_service):
        cash = chart_service.create_account(code="1110", name="Cash", account_type="asset", normal_balance="debit")

        with pytest.raises(ValidationError, match="not a header"):
            chart_service.create_account(
                code="1111", name="Petty Cash", account_type="asset", normal_balance="debit", parent_id=cash.id
            )


class TestResolveAndTree:
    def test_resolve_by_code(self, chart_service, seeded_chart):
        assert chart_service.resolve("1300").name == "Inventory"

    def test_resolve_unknown_code(self, chart_service, seeded_chart):
        with pytest.raises(ValidationError, match="'9999' not found"):
            chart_service.resolve("9999")

    def test_require_unknown_account(self, chart_service):
        with pytest.raises(NotFoundError):
            chart_service.require_account(42)

    def test_children_of_header(self, chart_service, seeded_chart):
        codes = [account.code for account in chart_service.children(seeded_chart["1100"].id)]
        assert codes == ["1110", "1120"]

    def test_roots(self, chart_service, seeded_chart):
        codes = [account.code for account in chart_service.children(None)]
        assert codes == ["1000", "2000", "3000", "4000", "5000", "6000"]

    def test_children_cache_is_invalidated_on_create(self, chart_service, seeded_chart):
        parent_id = seeded_chart["1100"].id
        assert len(chart_service.children(parent_id)) == 2

        chart_service.create_account(
            code="1130", name="Bank Mandiri", account_type="asset", normal_balance="debit", parent_id=parent_id
        )

        assert [a.code for a in chart_service.children(parent_id)] == ["1110", "1120", "1130"]

    def test_children_see_accounts_created_by_another_service(self, chart_service, temp_db, seeded_chart):
        parent_id = seeded_chart["1100"].id
        other = ChartOfAccountsService(temp_db)
        assert len(other.children(parent_id)) == 2

        chart_service.create_account(
            code="1130", name="Bank Mandiri", account_type="asset", normal_balance="debit", parent_id=parent_id
        )

        assert [a.code for a in other.children(parent_id)] == ["1110", "1120", "1130"]

    def test_rolled_back_create_leaves_children_unchanged(self, chart_service, temp_db, seeded_chart):
        parent_id = seeded_chart["1100"].id

        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                chart_service.create_account(
                    code="1130", name="Bank Mandiri", account_type="asset", normal_balance="debit", parent_id=parent_id
                )
                assert len(chart_service.children(parent_id)) == 3
                raise RuntimeError("abort")

        assert [a.code for a in chart_service.children(parent_id)] == ["1110", "1120"]

    def test_account_tree(self, chart_service, seeded_chart):
        tree = chart_service.account_tree()
        assets = tree[0]

        assert assets.account.code == "1000"
        assert [node.account.code for node in assets.children] == ["1100", "1200", "1300", "1400", "1500"]
        cash_and_bank = assets.children[0]
        assert [node.account.code for node in cash_and_bank.children] == ["1110", "1120"]


class TestUpdateAccount:
    def test_rename(self, chart_service, seeded_chart):
        updated = chart_service.update_account(seeded_chart["1120"].id, name="Bank BCA")
        assert updated.name == "Bank BCA"

    def test_unknown_field_rejected(self, chart_service, seeded_chart):
        with pytest.raises(ValidationError, match="is_active"):
            chart_service.update_account(seeded_chart["1120"].id, is_active=False)

    def test_move_under_own_descendant_rejected(self, chart_service, seeded_chart):
        with pytest.raises(ValidationError, match="descendant"):
            chart_service.update_account(seeded_chart["1000"].id, parent_id=seeded_chart["1100"].id)

    def test_move_invalidates_children_cache(self, chart_service, seeded_chart):
        assert len(chart_service.children(seeded_chart["1500"].id)) == 2

        chart_service.update_account(seeded_chart["1510"].id, parent_id=seeded_chart["1100"].id)

        assert [a.code for a in chart_service.children(seeded_chart["1500"].id)] == ["1590"]
        assert "1510" in [a.code for a in chart_service.children(seeded_chart["1100"].id)]

    def test_reclassify_with_posted_lines_rejected(self, chart_service, journal_service, seeded_chart):
        _post_simple(journal_service)

        with pytest.raises(ReferentialIntegrityError):
            chart_service.update_account(seeded_chart["6100"].id, account_type="asset")

    def test_reclassify_without_lines_allowed(self, chart_service, seeded_chart):
        updated = chart_service.update_account(seeded_chart["2300"].id, account_type="equity")
        assert updated.account_type == AccountType.EQUITY


class TestRemoval:
    def test_delete_unused_account(self, chart_service, seeded_chart):
        chart_service.delete_account(seeded_chart["6300"].id)
        assert chart_service.get_account(seeded_chart["6300"].id) is None

    def test_delete_with_posted_lines_rejected(self, chart_service, journal_service, seeded_chart):
        _post_simple(journal_service)

        with pytest.raises(ReferentialIntegrityError, match="Deactivate it instead"):
            chart_service.delete_account(seeded_chart["6100"].id)
        assert chart_service.get_account(seeded_chart["6100"].id) is not None

    def test_delete_header_with_children_rejected(self, chart_service, seeded_chart):
        with pytest.raises(ReferentialIntegrityError, match="child account"):
            chart_service.delete_account(seeded_chart["1100"].id)

    def test_deactivated_account_keeps_history_but_rejects_postings(
        self, chart_service, journal_service, seeded_chart
    ):
        entry = _post_simple(journal_service)
        chart_service.deactivate(seeded_chart["6100"].id)

        assert not chart_service.require_account(seeded_chart["6100"].id).is_active
        assert journal_service.get_entry(entry.id) is not None
        with pytest.raises(ValidationError, match="inactive"):
            _post_simple(journal_service)

    def test_list_active_only(self, chart_service, seeded_chart):
        chart_service.deactivate(seeded_chart["6300"].id)

        active = {a.code for a in chart_service.list_accounts(include_inactive=False)}
        assert "6300" not in active
        assert "6300" in {a.code for a in chart_service.list_accounts()}
