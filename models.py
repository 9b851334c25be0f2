# models.py
from datetime import date

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship

from database import Base


# =========================================
# =============== Master ==================
# =========================================

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False, default="PRODUCTION")  # SUPER_ADMIN / ADMIN / PRODUCTION
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    inventory = relationship("UserInventory", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(email={self.email}, role={self.role})>"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    number = Column(String, unique=True, index=True, nullable=False)  # phone
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String, nullable=True)
    pincode = Column(String, nullable=True)
    gstin = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    invoices = relationship("Invoice", back_populates="customer")

    def __repr__(self):
        return f"<Customer(name={self.name}, number={self.number})>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Category(name={self.name}, slug={self.slug})>"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True)
    size = Column(String, nullable=True)
    price = Column(Numeric(18, 2), nullable=False, default=0)
    cost_price = Column(Numeric(18, 2), nullable=True)
    quantity = Column(Numeric(18, 3), nullable=False, default=0)  # finished stock
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    structure = relationship(
        "ProductStructure",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_products_quantity_nonneg"),)

    def __repr__(self):
        return f"<Product(name={self.name}, qty={self.quantity})>"


# =========================================
# =============== Billing =================
# =========================================

class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String, unique=True, index=True, nullable=False)
    invoice_date = Column(Date, nullable=False, default=date.today)
    due_date = Column(Date, nullable=True)
    delivery_date = Column(Date, nullable=True)

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    shipping_name = Column(String, nullable=True)
    shipping_address = Column(Text, nullable=True)

    company_type = Column(String, nullable=False, default="RUDRA")  # RUDRA / YADNYASENI
    gst_applied = Column(Boolean, nullable=False, default=True)
    overall_discount = Column(Numeric(5, 2), nullable=False, default=0)

    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    discount_total = Column(Numeric(18, 2), nullable=False, default=0)
    cgst = Column(Numeric(18, 2), nullable=False, default=0)
    sgst = Column(Numeric(18, 2), nullable=False, default=0)
    extra_charges = Column(Numeric(18, 2), nullable=False, default=0)
    total = Column(Numeric(18, 2), nullable=False, default=0)
    advance_paid = Column(Numeric(18, 2), nullable=False, default=0)
    balance_due = Column(Numeric(18, 2), nullable=False, default=0)
    status = Column(String, nullable=False, default="UNPAID")  # PAID / UNPAID / ADVANCE
    total_in_words = Column(String, nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )

    __table_args__ = (
        Index("ix_invoices_status", "status"),
        Index("ix_invoices_company_date", "company_type", "invoice_date"),
    )

    def __repr__(self):
        return f"<Invoice(number={self.invoice_number}, total={self.total}, status={self.status})>"


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    hsn = Column(String, nullable=True)
    unit = Column(String, nullable=True)
    quantity = Column(Numeric(18, 3), nullable=False)
    base_price = Column(Numeric(18, 2), nullable=False)
    price = Column(Numeric(18, 2), nullable=False)  # displayed unit price
    discount_pct = Column(Numeric(5, 2), nullable=True)
    discount_amount = Column(Numeric(18, 2), nullable=False, default=0)
    gst_applied = Column(Boolean, nullable=False, default=True)
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    cgst = Column(Numeric(18, 2), nullable=False, default=0)
    sgst = Column(Numeric(18, 2), nullable=False, default=0)
    total = Column(Numeric(18, 2), nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")
    product = relationship("Product")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    customer_name = Column(String, nullable=False, index=True)
    customer_number = Column(String, nullable=False, index=True)
    amount = Column(Numeric(18, 2), nullable=False)
    payment_method = Column(String, nullable=False)  # UPI / CASH / BANK_TRANSFER / CARD
    transaction_id = Column(String, nullable=True)
    receipt_number = Column(String, unique=True, index=True, nullable=False)
    status = Column(String, nullable=False, default="COMPLETED")  # COMPLETED / DUE / OVERDUE
    due_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (CheckConstraint("amount > 0", name="ck_payments_amount_pos"),)

    def __repr__(self):
        return f"<Payment(receipt={self.receipt_number}, amount={self.amount})>"


class CreditNote(Base):
    __tablename__ = "credit_notes"

    id = Column(Integer, primary_key=True)
    credit_note_number = Column(String, unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    invoice_number = Column(String, nullable=True)
    reason = Column(Text, nullable=True)
    amount = Column(Numeric(18, 2), nullable=False)
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    total_amount = Column(Numeric(18, 2), nullable=False)
    status = Column(String, nullable=False, default="DRAFT")  # DRAFT / ISSUED / APPLIED / CANCELLED
    issue_date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    customer = relationship("Customer")


# =========================================
# ============ Vendor ledger ==============
# =========================================

class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    company_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    gstin = Column(String, unique=True, nullable=True)
    payment_terms = Column(String, nullable=True)
    opening_balance = Column(Numeric(18, 2), nullable=False, default=0)
    credit_limit = Column(Numeric(18, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    bills = relationship("VendorBill", back_populates="vendor")
    payments = relationship("VendorPayment", back_populates="vendor")
    credit_notes = relationship("VendorCreditNote", back_populates="vendor")

    def __repr__(self):
        return f"<Vendor(name={self.name})>"


class VendorBill(Base):
    __tablename__ = "vendor_bills"

    id = Column(Integer, primary_key=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    bill_number = Column(String, unique=True, index=True, nullable=False)
    bill_date = Column(Date, nullable=False, default=date.today)
    due_date = Column(Date, nullable=True)
    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    total_amount = Column(Numeric(18, 2), nullable=False)
    amount_paid = Column(Numeric(18, 2), nullable=False, default=0)
    balance_due = Column(Numeric(18, 2), nullable=False)
    status = Column(String, nullable=False, default="PENDING")  # DRAFT/PENDING/PARTIAL/PAID/OVERDUE/CANCELLED
    payment_terms = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    items_description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    vendor = relationship("Vendor", back_populates="bills")

    __table_args__ = (
        Index("ix_vendor_bills_status_due", "status", "due_date"),
        CheckConstraint("total_amount > 0", name="ck_vendor_bills_total_pos"),
    )

    def __repr__(self):
        return f"<VendorBill(number={self.bill_number}, balance={self.balance_due}, status={self.status})>"


class VendorPayment(Base):
    __tablename__ = "vendor_payments"

    id = Column(Integer, primary_key=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 2), nullable=False)
    payment_method = Column(String, nullable=False)  # CASH / UPI / BANK_TRANSFER / CHEQUE / CARD
    transaction_id = Column(String, nullable=True)
    reference_number = Column(String, unique=True, index=True, nullable=False)
    product_name = Column(String, nullable=True)
    payment_date = Column(Date, nullable=False, default=date.today)
    bill_numbers = Column(JSON, nullable=False, default=list)
    status = Column(String, nullable=False, default="PAID")  # PAID / DUE / OVERDUE / PARTIAL
    due_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    vendor = relationship("Vendor", back_populates="payments")

    __table_args__ = (CheckConstraint("amount > 0", name="ck_vendor_payments_amount_pos"),)


class VendorCreditNote(Base):
    __tablename__ = "vendor_credit_notes"

    id = Column(Integer, primary_key=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    credit_note_number = Column(String, unique=True, index=True, nullable=False)
    bill_number = Column(String, nullable=True)
    reason = Column(Text, nullable=True)
    amount = Column(Numeric(18, 2), nullable=False)
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    total_amount = Column(Numeric(18, 2), nullable=False)
    status = Column(String, nullable=False, default="DRAFT")  # DRAFT / ISSUED / APPLIED / CANCELLED
    issue_date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text, nullable=True)

    applied_to_bill = Column(String, nullable=True)
    applied_bill_id = Column(Integer, ForeignKey("vendor_bills.id"), nullable=True)
    applied_date = Column(DateTime(timezone=True), nullable=True)
    original_credit_note_id = Column(Integer, ForeignKey("vendor_credit_notes.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    vendor = relationship("Vendor", back_populates="credit_notes")
    applied_bill = relationship("VendorBill")
    original = relationship("VendorCreditNote", remote_side=[id])


# =========================================
# ============ Manufacturing ==============
# =========================================

class RawMaterial(Base):
    __tablename__ = "raw_materials"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    quantity = Column(Numeric(18, 3), nullable=False, default=0)
    unit = Column(String, nullable=False, default="pcs", server_default="pcs")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_raw_materials_quantity_nonneg"),)

    def __repr__(self):
        return f"<RawMaterial(name={self.name}, qty={self.quantity} {self.unit})>"


class ProductStructure(Base):
    """Bill of materials line: units of a raw material needed per product unit."""
    __tablename__ = "product_structures"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    raw_material_id = Column(Integer, ForeignKey("raw_materials.id"), nullable=False, index=True)
    quantity_required = Column(Numeric(18, 3), nullable=False)

    product = relationship("Product", back_populates="structure")
    raw_material = relationship("RawMaterial")

    __table_args__ = (
        UniqueConstraint("product_id", "raw_material_id", name="uq_product_structures_product_material"),
        CheckConstraint("quantity_required > 0", name="ck_product_structures_qty_pos"),
    )


class UserInventory(Base):
    __tablename__ = "user_inventory"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    raw_material_id = Column(Integer, ForeignKey("raw_materials.id"), nullable=False, index=True)
    quantity = Column(Numeric(18, 3), nullable=False, default=0)
    unit = Column(String, nullable=False, default="pcs")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="inventory")
    raw_material = relationship("RawMaterial")

    __table_args__ = (
        UniqueConstraint("user_id", "raw_material_id", name="uq_user_inventory_user_material"),
        CheckConstraint("quantity >= 0", name="ck_user_inventory_quantity_nonneg"),
    )


class RawMaterialTransfer(Base):
    __tablename__ = "raw_material_transfers"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    raw_material_id = Column(Integer, ForeignKey("raw_materials.id"), nullable=False, index=True)
    quantity_issued = Column(Numeric(18, 3), nullable=False)
    quantity_approved = Column(Numeric(18, 3), nullable=False, default=0)
    quantity_rejected = Column(Numeric(18, 3), nullable=False, default=0)
    # SENT / USED / RETURNED / REPAIRING / FINISHED / UNUSED / CANCELLED
    status = Column(String, nullable=False, default="SENT")
    rejection_type = Column(String, nullable=True)  # FULL / PARTIAL
    rejection_reason = Column(Text, nullable=True)
    rejection_images = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    # set by manufacturing complete; the issued qty now lives in product stock
    consumed_in_manufacturing = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    raw_material = relationship("RawMaterial")

    __table_args__ = (
        Index("ix_raw_material_transfers_user_status", "user_id", "status"),
        CheckConstraint("quantity_issued > 0", name="ck_rm_transfers_issued_pos"),
        CheckConstraint("quantity_rejected <= quantity_issued", name="ck_rm_transfers_rejected_le_issued"),
    )

    def __repr__(self):
        return f"<RawMaterialTransfer(id={self.id}, user_id={self.user_id}, status={self.status})>"


class RawMaterialConsumption(Base):
    __tablename__ = "raw_material_consumption"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    raw_material_id = Column(Integer, ForeignKey("raw_materials.id"), nullable=False)
    product_transfer_id = Column(Integer, ForeignKey("product_transfers.id", ondelete="CASCADE"), nullable=True, index=True)
    quantity_used = Column(Numeric(18, 3), nullable=False)
    unit = Column(String, nullable=False, default="pcs")
    product_transfer_quantity = Column(Numeric(18, 3), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    raw_material = relationship("RawMaterial")


class ProductTransfer(Base):
    __tablename__ = "product_transfers"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity_sent = Column(Numeric(18, 3), nullable=False)
    status = Column(String, nullable=False, default="SENT")  # SENT / RECEIVED / REJECTED / CANCELLED
    received_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    received_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    product = relationship("Product")
    user = relationship("User", foreign_keys=[user_id])
    consumption = relationship("RawMaterialConsumption", cascade="all, delete-orphan")

    __table_args__ = (CheckConstraint("quantity_sent > 0", name="ck_product_transfers_qty_pos"),)


# =========================================
# ============== Numbering ================
# =========================================

class DocCounter(Base):
    __tablename__ = "doc_counters"
    doc_type = Column(String, primary_key=True)          # "RCP", "BILL", "VPMT", ...
    financial_year = Column(String, primary_key=True)    # "2024-2025"
    seq = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("doc_type", "financial_year", name="uq_doc_counters_type_fy"),
    )
