from __future__ import annotations

from typing import Optional, Literal, List
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =========================
# ===== Base (Pydantic v2)
# =========================
class APIBase(BaseModel):
    """
    Base for every response schema:
    - from_attributes=True: build straight from SQLAlchemy rows
    - json_encoders: Decimal -> float in JSON
    """
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={Decimal: float}
    )


class Page(APIBase):
    total: int
    page: int
    per_page: int
    pages: int


CompanyType = Literal["RUDRA", "YADNYASENI"]
InvoiceStatus = Literal["PAID", "UNPAID", "ADVANCE"]
PaymentMethod = Literal["UPI", "CASH", "BANK_TRANSFER", "CARD"]
PaymentStatus = Literal["COMPLETED", "DUE", "OVERDUE"]
VendorPaymentMethod = Literal["CASH", "UPI", "BANK_TRANSFER", "CHEQUE", "CARD"]
VendorPaymentStatus = Literal["PAID", "DUE", "OVERDUE", "PARTIAL"]
BillStatus = Literal["DRAFT", "PENDING", "PARTIAL", "PAID", "OVERDUE", "CANCELLED"]
CreditNoteStatus = Literal["DRAFT", "ISSUED", "APPLIED", "CANCELLED"]
UserRole = Literal["SUPER_ADMIN", "ADMIN", "PRODUCTION"]
RawTransferStatus = Literal["SENT", "USED", "RETURNED", "REPAIRING", "FINISHED", "UNUSED", "CANCELLED"]
ProductTransferStatus = Literal["SENT", "RECEIVED", "REJECTED", "CANCELLED"]

# =========================================
# ================= Users =================
# =========================================
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    role: UserRole = "PRODUCTION"
    is_active: bool = True

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

class UserOut(APIBase):
    id: int
    name: str
    email: str
    role: str
    is_active: bool

# =========================================
# =============== Customers ===============
# =========================================
class CustomerBase(APIBase):
    name: str
    number: str
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    gstin: Optional[str] = None

class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    gstin: Optional[str] = None

class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    gstin: Optional[str] = None

class CustomerOut(CustomerBase):
    id: int

class CustomerPage(Page):
    items: List[CustomerOut]

# =========================================
# ============== Categories ===============
# =========================================
class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1)

class CategoryOut(APIBase):
    id: int
    name: str
    slug: str
    created_at: Optional[datetime] = None

# =========================================
# =============== Products ================
# =========================================
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    size: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    cost_price: Optional[Decimal] = Field(None, ge=Decimal("0"))
    quantity: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    size: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=Decimal("0"))
    cost_price: Optional[Decimal] = Field(None, ge=Decimal("0"))
    quantity: Optional[Decimal] = Field(None, ge=Decimal("0"))

class ProductOut(APIBase):
    id: int
    name: str
    category: Optional[str] = None
    size: Optional[str] = None
    price: Decimal
    cost_price: Optional[Decimal] = None
    quantity: Decimal

class ProductPage(Page):
    items: List[ProductOut]

class ProductQuantityDeduct(BaseModel):
    product_id: int
    quantity_to_deduct: Decimal = Field(..., gt=Decimal("0"))

# =========================================
# =============== Invoices ================
# =========================================
class InvoiceItemIn(BaseModel):
    product_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    hsn: Optional[str] = None
    unit: Optional[str] = None
    quantity: Decimal = Field(..., gt=Decimal("0"))
    base_price: Decimal = Field(..., ge=Decimal("0"))
    discount_pct: Optional[Decimal] = Field(None, ge=Decimal("0"), le=Decimal("100"))
    gst_applied: Optional[bool] = None  # None -> follow invoice

    @model_validator(mode="after")
    def _need_product_or_name(self):
        if self.product_id is None and not (self.name or "").strip():
            raise ValueError("Item needs product_id or name")
        return self

class ShippingInfo(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None

class InvoiceCustomerIn(BaseModel):
    name: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    gstin: Optional[str] = None

class InvoicePricingIn(BaseModel):
    company_type: CompanyType = "RUDRA"
    gst_applied: bool = True
    overall_discount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"), le=Decimal("100"))
    extra_charges: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    advance_paid: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    items: List[InvoiceItemIn] = Field(..., min_length=1)

class InvoiceCreate(InvoicePricingIn):
    invoice_number: Optional[str] = None  # empty -> next INV number
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    delivery_date: Optional[date] = None
    customer: InvoiceCustomerIn
    shipping: Optional[ShippingInfo] = None
    status: Optional[InvoiceStatus] = None  # None -> derived from advance
    description: Optional[str] = None

class InvoiceUpdate(BaseModel):
    company_type: Optional[CompanyType] = None
    gst_applied: Optional[bool] = None
    overall_discount: Optional[Decimal] = Field(None, ge=Decimal("0"), le=Decimal("100"))
    extra_charges: Optional[Decimal] = Field(None, ge=Decimal("0"))
    advance_paid: Optional[Decimal] = Field(None, ge=Decimal("0"))
    items: Optional[List[InvoiceItemIn]] = Field(None, min_length=1)
    status: Optional[InvoiceStatus] = None
    due_date: Optional[date] = None
    delivery_date: Optional[date] = None
    shipping: Optional[ShippingInfo] = None
    description: Optional[str] = None

class InvoicePaymentIn(BaseModel):
    amount: Decimal = Field(..., gt=Decimal("0"))
    payment_method: PaymentMethod = "CASH"
    transaction_id: Optional[str] = None
    record_receipt: bool = True

class InvoiceWhatsAppOut(BaseModel):
    whatsapp_url: str
    invoice_url: str
    sent_to: str
    customer_name: str
    invoice_number: str
    message: str

class InvoiceItemOut(APIBase):
    id: Optional[int] = None
    product_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    hsn: Optional[str] = None
    unit: Optional[str] = None
    quantity: Decimal
    base_price: Decimal
    price: Decimal
    discount_pct: Optional[Decimal] = None
    discount_amount: Decimal
    gst_applied: bool
    subtotal: Decimal
    cgst: Decimal
    sgst: Decimal
    total: Decimal

class InvoiceOut(APIBase):
    id: int
    invoice_number: str
    invoice_date: date
    due_date: Optional[date] = None
    delivery_date: Optional[date] = None
    customer: CustomerOut
    shipping_name: Optional[str] = None
    shipping_address: Optional[str] = None
    company_type: str
    gst_applied: bool
    overall_discount: Decimal
    subtotal: Decimal
    discount_total: Decimal
    cgst: Decimal
    sgst: Decimal
    extra_charges: Decimal
    total: Decimal
    advance_paid: Decimal
    balance_due: Decimal
    status: str
    total_in_words: Optional[str] = None
    description: Optional[str] = None
    items: List[InvoiceItemOut] = Field(default_factory=list)

class InvoicePage(Page):
    items: List[InvoiceOut]

class CompanyOut(APIBase):
    code: str
    name: str
    address: str
    gstin: str
    city: str
    phone: str
    email: str
    gst_inclusive: bool

class InvoicePreviewOut(APIBase):
    company: CompanyOut
    lines: List[InvoiceItemOut]
    subtotal: Decimal
    discount_total: Decimal
    cgst: Decimal
    sgst: Decimal
    extra_charges: Decimal
    total: Decimal
    advance_paid: Decimal
    balance_due: Decimal
    status: str
    total_in_words: str

# =========================================
# =============== Payments ================
# =========================================
class PaymentCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_number: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=Decimal("0"))
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    receipt_number: Optional[str] = None  # empty -> next RCP number
    status: PaymentStatus = "COMPLETED"
    due_date: Optional[date] = None
    description: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _transaction_for_non_cash(self):
        if self.payment_method != "CASH" and not (self.transaction_id or "").strip():
            raise ValueError("Transaction ID is required for non-cash payments")
        return self

class PaymentUpdate(BaseModel):
    status: Optional[PaymentStatus] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    description: Optional[str] = None

class PaymentOut(APIBase):
    id: int
    customer_name: str
    customer_number: str
    amount: Decimal
    payment_method: str
    transaction_id: Optional[str] = None
    receipt_number: str
    status: str
    due_date: Optional[date] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

class PaymentCustomerOut(APIBase):
    customer_name: str
    customer_number: str
    total_payments: int
    total_amount: Decimal
    last_payment_date: Optional[datetime] = None

# =========================================
# =============== Counters ================
# =========================================
class CounterOut(APIBase):
    doc_type: str
    financial_year: str
    number: str

class CounterSyncOut(APIBase):
    doc_type: str
    financial_year: str
    seq: int
    next_number: str

# =========================================
# ============= Credit notes ==============
# =========================================
class CreditNoteCreate(BaseModel):
    credit_note_number: Optional[str] = None
    customer_id: int
    invoice_number: Optional[str] = None
    reason: Optional[str] = None
    amount: Decimal = Field(..., gt=Decimal("0"))
    tax_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    status: Literal["DRAFT", "ISSUED"] = "DRAFT"
    issue_date: Optional[date] = None
    notes: Optional[str] = None

class CreditNoteUpdate(BaseModel):
    status: Optional[CreditNoteStatus] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

class CreditNoteOut(APIBase):
    id: int
    credit_note_number: str
    customer_id: int
    invoice_number: Optional[str] = None
    reason: Optional[str] = None
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: str
    issue_date: date
    notes: Optional[str] = None

# =========================================
# ================ Vendors ================
# =========================================
class VendorCreate(BaseModel):
    name: str = Field(..., min_length=1)
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    payment_terms: Optional[str] = None
    opening_balance: Decimal = Decimal("0")
    credit_limit: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

class VendorUpdate(BaseModel):
    name: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    payment_terms: Optional[str] = None
    opening_balance: Optional[Decimal] = None
    credit_limit: Optional[Decimal] = Field(None, ge=Decimal("0"))

class VendorOut(APIBase):
    id: int
    name: str
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    payment_terms: Optional[str] = None
    opening_balance: Decimal
    credit_limit: Decimal

class VendorPage(Page):
    items: List[VendorOut]

class VendorBillCreate(BaseModel):
    vendor_id: int
    bill_number: Optional[str] = None  # empty -> next BILL number
    bill_date: Optional[date] = None
    due_date: Optional[date] = None
    subtotal: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    tax_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    total_amount: Decimal = Field(..., gt=Decimal("0"))
    amount_paid: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    status: Optional[BillStatus] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    items_description: Optional[str] = None

    @model_validator(mode="after")
    def _paid_le_total(self):
        if self.amount_paid > self.total_amount:
            raise ValueError("Amount paid cannot exceed total amount")
        return self

class VendorBillUpdate(BaseModel):
    due_date: Optional[date] = None
    subtotal: Optional[Decimal] = Field(None, ge=Decimal("0"))
    tax_amount: Optional[Decimal] = Field(None, ge=Decimal("0"))
    total_amount: Optional[Decimal] = Field(None, gt=Decimal("0"))
    amount_paid: Optional[Decimal] = Field(None, ge=Decimal("0"))
    status: Optional[BillStatus] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    items_description: Optional[str] = None

class VendorBillOut(APIBase):
    id: int
    vendor_id: int
    bill_number: str
    bill_date: date
    due_date: Optional[date] = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    status: str
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    items_description: Optional[str] = None

class VendorBillPage(Page):
    items: List[VendorBillOut]

class BillPaymentIn(BaseModel):
    amount: Decimal = Field(..., gt=Decimal("0"))
    payment_method: VendorPaymentMethod = "BANK_TRANSFER"
    transaction_id: Optional[str] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None

class CreditApplicationIn(BaseModel):
    credit_note_id: int
    amount: Decimal = Field(..., gt=Decimal("0"))

class ApplyCreditIn(BaseModel):
    applications: List[CreditApplicationIn] = Field(..., min_length=1)

class VendorPaymentCreate(BaseModel):
    vendor_id: int
    amount: Decimal = Field(..., gt=Decimal("0"))
    payment_method: VendorPaymentMethod
    transaction_id: Optional[str] = None
    reference_number: Optional[str] = None  # empty -> next VPMT number
    product_name: Optional[str] = None
    payment_date: Optional[date] = None
    bill_numbers: List[str] = Field(default_factory=list)
    status: VendorPaymentStatus = "PAID"
    due_date: Optional[date] = None
    notes: Optional[str] = None

class VendorPaymentUpdate(BaseModel):
    status: Optional[VendorPaymentStatus] = None
    due_date: Optional[date] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

class VendorPaymentOut(APIBase):
    id: int
    vendor_id: int
    amount: Decimal
    payment_method: str
    transaction_id: Optional[str] = None
    reference_number: str
    product_name: Optional[str] = None
    payment_date: date
    bill_numbers: List[str] = Field(default_factory=list)
    status: str
    due_date: Optional[date] = None
    notes: Optional[str] = None

class VendorCreditNoteCreate(BaseModel):
    vendor_id: int
    credit_note_number: Optional[str] = None  # empty -> next VCN number
    bill_number: Optional[str] = None
    reason: Optional[str] = None
    amount: Decimal = Field(..., gt=Decimal("0"))
    tax_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    status: Literal["DRAFT", "ISSUED"] = "DRAFT"
    issue_date: Optional[date] = None
    notes: Optional[str] = None

class VendorCreditNoteUpdate(BaseModel):
    status: Optional[CreditNoteStatus] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

class VendorCreditNoteOut(APIBase):
    id: int
    vendor_id: int
    credit_note_number: str
    bill_number: Optional[str] = None
    reason: Optional[str] = None
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: str
    issue_date: date
    notes: Optional[str] = None
    applied_to_bill: Optional[str] = None
    applied_bill_id: Optional[int] = None
    applied_date: Optional[datetime] = None
    original_credit_note_id: Optional[int] = None

class ApplyCreditOut(APIBase):
    bill: VendorBillOut
    total_applied: Decimal
    credit_notes: List[VendorCreditNoteOut]

class BillPaymentOut(APIBase):
    bill: VendorBillOut
    payment: VendorPaymentOut

class VendorSummary(APIBase):
    total_bills: Decimal
    total_payments: Decimal
    total_credit_notes: Decimal
    outstanding_balance: Decimal
    opening_balance: Decimal
    current_balance: Decimal
    credit_limit: Decimal
    credit_utilization: Decimal

class VendorHistoryOut(APIBase):
    vendor: VendorOut
    bills: List[VendorBillOut]
    payments: List[VendorPaymentOut]
    credit_notes: List[VendorCreditNoteOut]
    summary: VendorSummary

# =========================================
# ============ Manufacturing ==============
# =========================================
class RawMaterialCreate(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    unit: str = "pcs"

class RawMaterialUpdate(BaseModel):
    name: Optional[str] = None
    quantity: Optional[Decimal] = Field(None, ge=Decimal("0"))
    unit: Optional[str] = None

class RawMaterialOut(APIBase):
    id: int
    name: str
    quantity: Decimal
    unit: str

class RawMaterialStockOut(APIBase):
    id: int
    name: str
    unit: str
    available: Decimal
    sent_to_users: Decimal
    used: Decimal
    remaining_with_users: Decimal

class StructureItemIn(BaseModel):
    raw_material_id: int
    quantity_required: Decimal = Field(..., gt=Decimal("0"))

class ProductStructureCreate(BaseModel):
    product_id: int
    items: List[StructureItemIn] = Field(..., min_length=1)

class ProductStructureOut(APIBase):
    id: int
    product_id: int
    raw_material_id: int
    quantity_required: Decimal
    raw_material: RawMaterialOut

class ProductStructureGroup(APIBase):
    product: ProductOut
    items: List[ProductStructureOut]

class RequiredMaterialOut(APIBase):
    raw_material_id: int
    name: str
    unit: str
    quantity_per_unit: Decimal
    quantity_required: Decimal
    available: Decimal

class ProductRequirementOut(APIBase):
    product: ProductOut
    quantity: Decimal
    required_materials: List[RequiredMaterialOut]

class UserInventoryOut(APIBase):
    id: int
    user_id: int
    raw_material_id: int
    quantity: Decimal
    unit: str
    raw_material: RawMaterialOut

class UserInventoryAdjust(BaseModel):
    user_id: int
    raw_material_id: int
    quantity: Decimal = Field(..., gt=Decimal("0"))
    action: Literal["ADD", "SUBTRACT"]

class TransferItemIn(BaseModel):
    raw_material_id: int
    quantity_issued: Decimal = Field(..., gt=Decimal("0"))
    notes: Optional[str] = None

class RawMaterialTransferCreate(BaseModel):
    user_id: int
    items: List[TransferItemIn] = Field(..., min_length=1)

class RawMaterialTransferUpdate(BaseModel):
    status: RawTransferStatus
    return_quantity: Optional[Decimal] = Field(None, gt=Decimal("0"))
    rejection_reason: Optional[str] = None
    rejection_images: Optional[List[str]] = None
    notes: Optional[str] = None

class RawMaterialTransferOut(APIBase):
    id: int
    user_id: int
    raw_material_id: int
    quantity_issued: Decimal
    quantity_approved: Decimal
    quantity_rejected: Decimal
    status: str
    rejection_type: Optional[str] = None
    rejection_reason: Optional[str] = None
    rejection_images: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    consumed_in_manufacturing: bool = False
    created_at: Optional[datetime] = None
    raw_material: RawMaterialOut

class ProductTransferCreate(BaseModel):
    user_id: int
    product_id: int
    quantity_sent: Decimal = Field(..., gt=Decimal("0"))
    notes: Optional[str] = None

class ProductTransferUpdate(BaseModel):
    status: ProductTransferStatus
    received_by: Optional[int] = None
    notes: Optional[str] = None

class ConsumptionOut(APIBase):
    raw_material_id: int
    quantity_used: Decimal
    unit: str

class ProductTransferOut(APIBase):
    id: int
    user_id: int
    product_id: int
    quantity_sent: Decimal
    status: str
    received_by: Optional[int] = None
    received_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    product: ProductOut
    consumption: List[ConsumptionOut] = Field(default_factory=list)

class ManufacturingCompleteIn(BaseModel):
    user_id: int
    product_id: int
    quantity_produced: Decimal = Field(..., gt=Decimal("0"))
    transfer_ids: List[int] = Field(default_factory=list)

class ManufacturingCompleteOut(APIBase):
    message: str
    product_id: int
    quantity_produced: Decimal
    product_quantity: Decimal
    transfers_used: List[int]
