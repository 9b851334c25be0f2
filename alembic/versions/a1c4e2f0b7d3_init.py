"""init

Revision ID: a1c4e2f0b7d3
Revises:
Create Date: 2025-10-02 10:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c4e2f0b7d3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def _updated_at():
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True)


def upgrade() -> None:
    """Upgrade schema."""

    # ===== Masters (no FKs out) =====
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("number", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("pincode", sa.String(), nullable=True),
        sa.Column("gstin", sa.String(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_customers_name"), "customers", ["name"], unique=False)
    op.create_index(op.f("ix_customers_number"), "customers", ["number"], unique=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("size", sa.String(), nullable=True),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("cost_price", sa.Numeric(18, 2), nullable=True),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        _created_at(),
        sa.CheckConstraint("quantity >= 0", name="ck_products_quantity_nonneg"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_products_name"), "products", ["name"], unique=False)

    op.create_table(
        "raw_materials",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit", sa.String(), server_default="pcs", nullable=False),
        _created_at(),
        sa.CheckConstraint("quantity >= 0", name="ck_raw_materials_quantity_nonneg"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_raw_materials_name"), "raw_materials", ["name"], unique=False)

    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("gstin", sa.String(), nullable=True),
        sa.Column("payment_terms", sa.String(), nullable=True),
        sa.Column("opening_balance", sa.Numeric(18, 2), nullable=False),
        sa.Column("credit_limit", sa.Numeric(18, 2), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("gstin"),
    )
    op.create_index(op.f("ix_vendors_name"), "vendors", ["name"], unique=False)

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(), nullable=False),
        sa.Column("customer_number", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("payment_method", sa.String(), nullable=False),
        sa.Column("transaction_id", sa.String(), nullable=True),
        sa.Column("receipt_number", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_pos"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payments_customer_name"), "payments", ["customer_name"], unique=False)
    op.create_index(op.f("ix_payments_customer_number"), "payments", ["customer_number"], unique=False)
    op.create_index(op.f("ix_payments_receipt_number"), "payments", ["receipt_number"], unique=True)

    op.create_table(
        "doc_counters",
        sa.Column("doc_type", sa.String(), nullable=False),
        sa.Column("financial_year", sa.String(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("doc_type", "financial_year"),
        sa.UniqueConstraint("doc_type", "financial_year", name="uq_doc_counters_type_fy"),
    )

    # ===== Billing =====
    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("invoice_number", sa.String(), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("delivery_date", sa.Date(), nullable=True),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("shipping_name", sa.String(), nullable=True),
        sa.Column("shipping_address", sa.Text(), nullable=True),
        sa.Column("company_type", sa.String(), nullable=False),
        sa.Column("gst_applied", sa.Boolean(), nullable=False),
        sa.Column("overall_discount", sa.Numeric(5, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(18, 2), nullable=False),
        sa.Column("discount_total", sa.Numeric(18, 2), nullable=False),
        sa.Column("cgst", sa.Numeric(18, 2), nullable=False),
        sa.Column("sgst", sa.Numeric(18, 2), nullable=False),
        sa.Column("extra_charges", sa.Numeric(18, 2), nullable=False),
        sa.Column("total", sa.Numeric(18, 2), nullable=False),
        sa.Column("advance_paid", sa.Numeric(18, 2), nullable=False),
        sa.Column("balance_due", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("total_in_words", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_invoices_invoice_number"), "invoices", ["invoice_number"], unique=True)
    op.create_index(op.f("ix_invoices_customer_id"), "invoices", ["customer_id"], unique=False)
    op.create_index("ix_invoices_status", "invoices", ["status"], unique=False)
    op.create_index("ix_invoices_company_date", "invoices", ["company_type", "invoice_date"], unique=False)

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("hsn", sa.String(), nullable=True),
        sa.Column("unit", sa.String(), nullable=True),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("base_price", sa.Numeric(18, 2), nullable=False),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("discount_pct", sa.Numeric(5, 2), nullable=True),
        sa.Column("discount_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("gst_applied", sa.Boolean(), nullable=False),
        sa.Column("subtotal", sa.Numeric(18, 2), nullable=False),
        sa.Column("cgst", sa.Numeric(18, 2), nullable=False),
        sa.Column("sgst", sa.Numeric(18, 2), nullable=False),
        sa.Column("total", sa.Numeric(18, 2), nullable=False),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_invoice_items_invoice_id"), "invoice_items", ["invoice_id"], unique=False)
    op.create_index(op.f("ix_invoice_items_product_id"), "invoice_items", ["product_id"], unique=False)

    op.create_table(
        "credit_notes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("credit_note_number", sa.String(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("invoice_number", sa.String(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_credit_notes_credit_note_number"), "credit_notes", ["credit_note_number"], unique=True)
    op.create_index(op.f("ix_credit_notes_customer_id"), "credit_notes", ["customer_id"], unique=False)

    # ===== Vendor ledger =====
    op.create_table(
        "vendor_bills",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("bill_number", sa.String(), nullable=False),
        sa.Column("bill_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("subtotal", sa.Numeric(18, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("amount_paid", sa.Numeric(18, 2), nullable=False),
        sa.Column("balance_due", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("payment_terms", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("items_description", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("total_amount > 0", name="ck_vendor_bills_total_pos"),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendor_bills_bill_number"), "vendor_bills", ["bill_number"], unique=True)
    op.create_index(op.f("ix_vendor_bills_vendor_id"), "vendor_bills", ["vendor_id"], unique=False)
    op.create_index("ix_vendor_bills_status_due", "vendor_bills", ["status", "due_date"], unique=False)

    op.create_table(
        "vendor_payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("payment_method", sa.String(), nullable=False),
        sa.Column("transaction_id", sa.String(), nullable=True),
        sa.Column("reference_number", sa.String(), nullable=False),
        sa.Column("product_name", sa.String(), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("bill_numbers", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint("amount > 0", name="ck_vendor_payments_amount_pos"),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendor_payments_reference_number"), "vendor_payments", ["reference_number"], unique=True)
    op.create_index(op.f("ix_vendor_payments_vendor_id"), "vendor_payments", ["vendor_id"], unique=False)

    op.create_table(
        "vendor_credit_notes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("credit_note_number", sa.String(), nullable=False),
        sa.Column("bill_number", sa.String(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("applied_to_bill", sa.String(), nullable=True),
        sa.Column("applied_bill_id", sa.Integer(), nullable=True),
        sa.Column("applied_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("original_credit_note_id", sa.Integer(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.ForeignKeyConstraint(["applied_bill_id"], ["vendor_bills.id"]),
        sa.ForeignKeyConstraint(["original_credit_note_id"], ["vendor_credit_notes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_vendor_credit_notes_credit_note_number"), "vendor_credit_notes", ["credit_note_number"], unique=True
    )
    op.create_index(op.f("ix_vendor_credit_notes_vendor_id"), "vendor_credit_notes", ["vendor_id"], unique=False)

    # ===== Manufacturing =====
    op.create_table(
        "product_structures",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("raw_material_id", sa.Integer(), nullable=False),
        sa.Column("quantity_required", sa.Numeric(18, 3), nullable=False),
        sa.CheckConstraint("quantity_required > 0", name="ck_product_structures_qty_pos"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["raw_material_id"], ["raw_materials.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_id", "raw_material_id", name="uq_product_structures_product_material"),
    )
    op.create_index(op.f("ix_product_structures_product_id"), "product_structures", ["product_id"], unique=False)
    op.create_index(
        op.f("ix_product_structures_raw_material_id"), "product_structures", ["raw_material_id"], unique=False
    )

    op.create_table(
        "user_inventory",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("raw_material_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        _updated_at(),
        sa.CheckConstraint("quantity >= 0", name="ck_user_inventory_quantity_nonneg"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["raw_material_id"], ["raw_materials.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "raw_material_id", name="uq_user_inventory_user_material"),
    )
    op.create_index(op.f("ix_user_inventory_user_id"), "user_inventory", ["user_id"], unique=False)
    op.create_index(op.f("ix_user_inventory_raw_material_id"), "user_inventory", ["raw_material_id"], unique=False)

    op.create_table(
        "raw_material_transfers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("raw_material_id", sa.Integer(), nullable=False),
        sa.Column("quantity_issued", sa.Numeric(18, 3), nullable=False),
        sa.Column("quantity_approved", sa.Numeric(18, 3), nullable=False),
        sa.Column("quantity_rejected", sa.Numeric(18, 3), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("rejection_type", sa.String(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("rejection_images", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("quantity_issued > 0", name="ck_rm_transfers_issued_pos"),
        sa.CheckConstraint("quantity_rejected <= quantity_issued", name="ck_rm_transfers_rejected_le_issued"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["raw_material_id"], ["raw_materials.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_raw_material_transfers_user_id"), "raw_material_transfers", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_raw_material_transfers_raw_material_id"), "raw_material_transfers", ["raw_material_id"], unique=False
    )
    op.create_index(
        "ix_raw_material_transfers_user_status", "raw_material_transfers", ["user_id", "status"], unique=False
    )

    op.create_table(
        "product_transfers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity_sent", sa.Numeric(18, 3), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("received_by", sa.Integer(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint("quantity_sent > 0", name="ck_product_transfers_qty_pos"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.ForeignKeyConstraint(["received_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_product_transfers_user_id"), "product_transfers", ["user_id"], unique=False)
    op.create_index(op.f("ix_product_transfers_product_id"), "product_transfers", ["product_id"], unique=False)

    op.create_table(
        "raw_material_consumption",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("raw_material_id", sa.Integer(), nullable=False),
        sa.Column("product_transfer_id", sa.Integer(), nullable=True),
        sa.Column("quantity_used", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("product_transfer_quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.ForeignKeyConstraint(["raw_material_id"], ["raw_materials.id"]),
        sa.ForeignKeyConstraint(["product_transfer_id"], ["product_transfers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_raw_material_consumption_user_id"), "raw_material_consumption", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_raw_material_consumption_product_id"), "raw_material_consumption", ["product_id"], unique=False
    )
    op.create_index(
        op.f("ix_raw_material_consumption_product_transfer_id"),
        "raw_material_consumption",
        ["product_transfer_id"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "raw_material_consumption",
        "product_transfers",
        "raw_material_transfers",
        "user_inventory",
        "product_structures",
        "vendor_credit_notes",
        "vendor_payments",
        "vendor_bills",
        "credit_notes",
        "invoice_items",
        "invoices",
        "doc_counters",
        "payments",
        "vendors",
        "raw_materials",
        "products",
        "customers",
        "users",
    ):
        op.drop_table(table)
