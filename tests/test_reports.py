"""
Tests for the receipt and CSV renderers (golden text).
"""

from datetime import datetime

from fleetledger.models import Account, ExpenseCategory
from fleetledger.services.ledger import compute_posting, index_vehicles
from fleetledger.services.reports import CSV_HEADER, render_receipt, render_table

from conftest import make_expense

RULE = "─" * 37

PASSENGER_RECEIPT = f"""EXPENSE RECEIPT

Date: 01.05.2024
Vehicle: 34 ABC 123 (Passenger)
Category: Fuel
Gross Amount: 1200.00 TL
VAT Rate: %20
Base Amount: 1000.00 TL
Note: Shell, full tank

{RULE}
LEDGER POSTING
{RULE}

770 - General Administrative Expenses (Debit)
     700.00 TL

191 - Deductible VAT (Debit)
     140.00 TL

689 - Non-Deductible Expenses (Debit)
     360.00 TL

320 - Suppliers (Credit)
     1200.00 TL
"""

COMMERCIAL_RECEIPT = f"""EXPENSE RECEIPT

Date: 03.05.2024
Vehicle: 06 XYZ 99 (Commercial)
Category: Repair
Gross Amount: 1000.00 TL
VAT Rate: %20
Base Amount: 833.33 TL

{RULE}
LEDGER POSTING
{RULE}

770 - General Administrative Expenses (Debit)
     833.33 TL

191 - Deductible VAT (Debit)
     166.67 TL

320 - Suppliers (Credit)
     1000.00 TL
"""


class TestRenderReceipt:
    def test_passenger_receipt(self, passenger):
        expense = make_expense(note="Shell, full tank")

        text = render_receipt(expense, passenger, compute_posting(expense, passenger))

        assert text == PASSENGER_RECEIPT

    def test_commercial_receipt_omits_zero_689_and_empty_note(self, commercial):
        expense = make_expense(
            vehicle_id=commercial.id,
            gross_amount=1000,
            category=ExpenseCategory.REPAIR,
            date=datetime(2024, 5, 3, 9, 0),
        )

        text = render_receipt(expense, commercial, compute_posting(expense, commercial))

        assert text == COMMERCIAL_RECEIPT
        assert "689" not in text
        assert "Note:" not in text

    def test_zero_rate_omits_191_keeps_320(self, commercial):
        expense = make_expense(vehicle_id=commercial.id, gross_amount=100, vat_rate=0)

        text = render_receipt(expense, commercial, compute_posting(expense, commercial))

        assert "VAT Rate: %0" in text
        assert "191 -" not in text
        assert "770 - General Administrative Expenses (Debit)\n     100.00 TL" in text
        assert text.endswith("320 - Suppliers (Credit)\n     100.00 TL\n")

    def test_currency_suffix(self, passenger):
        expense = make_expense()

        text = render_receipt(
            expense, passenger, compute_posting(expense, passenger), currency_suffix="TRY"
        )

        assert "Gross Amount: 1200.00 TRY" in text
        assert " TL" not in text

    def test_account_lines_in_fixed_order(self, passenger):
        expense = make_expense()
        text = render_receipt(expense, passenger, compute_posting(expense, passenger))

        positions = [text.index(f"{a.value} - ") for a in Account]
        assert positions == sorted(positions)


class TestRenderTable:
    def test_golden_csv(self, passenger, commercial):
        expenses = [
            make_expense("e-1", passenger.id, 1200, 20, ExpenseCategory.FUEL,
                         datetime(2024, 5, 1, 10, 30), "Shell"),
            make_expense("e-2", commercial.id, 1000, 20, ExpenseCategory.REPAIR,
                         datetime(2024, 5, 3, 9, 0), 'Brake pads, "front"'),
            make_expense("e-3", "deleted-vehicle", 500, 20, ExpenseCategory.WASH,
                         datetime(2024, 5, 5)),
        ]

        text = render_table(expenses, index_vehicles([passenger, commercial]))

        assert text == (
            "Date,Plate,VehicleClass,Category,Gross,VatRate,Base,770,191,689,320,Note\n"
            '2024-05-03,06 XYZ 99,commercial,repair,1000.00,20,833.33,833.33,166.67,0.00,1000.00,"Brake pads, ""front"""\n'
            '2024-05-01,34 ABC 123,passenger,fuel,1200.00,20,1000.00,700.00,140.00,360.00,1200.00,"Shell"\n'
        )

    def test_empty_collection_is_header_only(self):
        assert render_table([], {}) == CSV_HEADER + "\n"

    def test_same_date_ordered_by_id(self, passenger):
        day = datetime(2024, 5, 1)
        expenses = [
            make_expense("e-b", gross_amount=10, date=day),
            make_expense("e-a", gross_amount=20, date=day),
            make_expense("e-c", gross_amount=30, date=datetime(2024, 4, 1)),
        ]

        rows = render_table(expenses, index_vehicles([passenger])).splitlines()[1:]

        assert [r.split(",")[4] for r in rows] == ["20.00", "10.00", "30.00"]

    def test_plate_with_delimiter_is_quoted(self, commercial):
        from fleetledger.models import Vehicle

        odd = Vehicle(id="v-odd", plate="34,AB", vehicle_class=commercial.vehicle_class)
        expense = make_expense(vehicle_id=odd.id)

        row = render_table([expense], {odd.id: odd}).splitlines()[1]

        assert row.startswith('2024-05-01,"34,AB",commercial,')
        assert row.endswith(',""')

    def test_inputs_not_mutated(self, passenger):
        expenses = [
            make_expense("e-2", date=datetime(2024, 1, 1)),
            make_expense("e-1", date=datetime(2024, 2, 1)),
        ]
        before = list(expenses)

        first = render_table(expenses, index_vehicles([passenger]))
        second = render_table(expenses, index_vehicles([passenger]))

        assert expenses == before
        assert first == second
