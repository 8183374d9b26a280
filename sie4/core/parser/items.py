"""
SIE 4 record models.

One frozen model per record kind. Each class carries its schema as class
variables:
- TAG: the label after ``#``
- GROUP: the ordering category
- FIELDS: ordered (field name, decoder) pairs, read by ``parse_body``

The set of kinds is closed; ``Item`` is the union of all of them.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum, IntEnum
from typing import ClassVar, Union

from pydantic import BaseModel, Field

from .fields import (
    amount,
    boolean,
    currency,
    date,
    int32,
    list_of,
    one_of,
    optional,
    text,
    uint32,
)
from .grammar import sub_items
from .span import Decoder

# =============================================================================
# Enums
# =============================================================================


class Group(IntEnum):
    """
    Ordering category of a record kind.

    Records in a file must appear in non-decreasing group order.
    """

    FLAG = 0
    IDENTIFICATION = 1
    ACCOUNT = 2
    BALANCE = 3


class FileFormat(Enum):
    """Character set declared by #FORMAT."""

    PC8 = "PC8"


class SieTypeNo(Enum):
    """SIE file type declared by #SIETYP."""

    SIE4 = "4"


class ChartOfAccounts(Enum):
    """Chart of accounts declared by #KPTYP."""

    BAS95 = "BAS95"
    BAS96 = "BAS96"
    EUBAS97 = "EUBAS97"
    NE2007 = "NE2007"


class AccountKind(Enum):
    """Account type declared by #KTYP."""

    ASSET = "T"  # Tillgång
    LIABILITY = "S"  # Skuld
    COST = "K"  # Kostnad
    INCOME = "I"  # Intäkt


# Date fields may be written as "" when absent
optional_date = optional(date, blank=True)
optional_text = optional(text)


# =============================================================================
# Base
# =============================================================================


class SieItem(BaseModel, frozen=True):
    """Base class of all record models."""

    TAG: ClassVar[str]
    GROUP: ClassVar[Group]
    FIELDS: ClassVar[tuple[tuple[str, Decoder], ...]]

    model_config = {"frozen": True}

    @property
    def group(self) -> Group:
        return self.GROUP

    @property
    def tag(self) -> str:
        return self.TAG


# =============================================================================
# Flag
# =============================================================================


class Flag(SieItem, frozen=True):
    """#FLAGGA: whether the file has been read by the receiver."""

    TAG = "FLAGGA"
    GROUP = Group.FLAG
    FIELDS = (("read", boolean),)

    read: bool


# =============================================================================
# Identification
# =============================================================================


class Program(SieItem, frozen=True):
    """#PROGRAM: exporting program and version."""

    TAG = "PROGRAM"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("name", text), ("version", text))

    name: str
    version: str


class Format(SieItem, frozen=True):
    TAG = "FORMAT"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("format", one_of(FileFormat)),)

    format: FileFormat


class GeneratedInfo(SieItem, frozen=True):
    """#GEN: when, and optionally by whom, the file was generated."""

    TAG = "GEN"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("date", date), ("signature", optional_text))

    date: dt.date
    signature: str | None = None


class SieType(SieItem, frozen=True):
    TAG = "SIETYP"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("type", one_of(SieTypeNo)),)

    type: SieTypeNo


class Comment(SieItem, frozen=True):
    """#PROSA: free-text comment about the file."""

    TAG = "PROSA"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("text", text),)

    text: str


class CompanyType(SieItem, frozen=True):
    """#FTYP: legal form of the company (AB, E, HB, ...)."""

    TAG = "FTYP"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("type", text),)

    type: str


class CompanyId(SieItem, frozen=True):
    """#FNR: the exporting program's internal company id."""

    TAG = "FNR"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("id", text),)

    id: str


class OrganizationNumber(SieItem, frozen=True):
    TAG = "ORGNR"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("org_no", text),)

    org_no: str


class IndustryCode(SieItem, frozen=True):
    """#BKOD: SNI industry code."""

    TAG = "BKOD"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("sni", text),)

    sni: str


class Address(SieItem, frozen=True):
    TAG = "ADRESS"
    GROUP = Group.IDENTIFICATION
    FIELDS = (
        ("contact", text),
        ("distribution_address", text),
        ("postal_address", text),
        ("phone", text),
    )

    contact: str
    distribution_address: str
    postal_address: str
    phone: str


class CompanyName(SieItem, frozen=True):
    TAG = "FNAMN"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("name", text),)

    name: str


class FinancialYear(SieItem, frozen=True):
    """#RAR: financial year; 0 is the current year, -1 the previous one."""

    TAG = "RAR"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("no", int32), ("start", date), ("end", date))

    no: int
    start: dt.date
    end: dt.date


class TaxYear(SieItem, frozen=True):
    TAG = "TAXAR"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("year", int32),)

    year: int


class BalanceDate(SieItem, frozen=True):
    """#OMFATTN: the date up to which balances are included."""

    TAG = "OMFATTN"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("date", date),)

    date: dt.date


class ChartType(SieItem, frozen=True):
    TAG = "KPTYP"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("chart_type", one_of(ChartOfAccounts)),)

    chart_type: ChartOfAccounts


class Currency(SieItem, frozen=True):
    TAG = "VALUTA"
    GROUP = Group.IDENTIFICATION
    FIELDS = (("currency", currency),)

    currency: str


# =============================================================================
# Account plan
# =============================================================================


class Account(SieItem, frozen=True):
    TAG = "KONTO"
    GROUP = Group.ACCOUNT
    FIELDS = (("no", uint32), ("name", text))

    no: int
    name: str


class AccountType(SieItem, frozen=True):
    TAG = "KTYP"
    GROUP = Group.ACCOUNT
    FIELDS = (("account", uint32), ("type", one_of(AccountKind)))

    account: int
    type: AccountKind


class AccountUnit(SieItem, frozen=True):
    """#ENHET: unit used for quantities on an account."""

    TAG = "ENHET"
    GROUP = Group.ACCOUNT
    FIELDS = (("account", uint32), ("unit", text))

    account: int
    unit: str


class SruCode(SieItem, frozen=True):
    """#SRU: tax return (SRU) code of an account."""

    TAG = "SRU"
    GROUP = Group.ACCOUNT
    FIELDS = (("account", uint32), ("code", uint32))

    account: int
    code: int


class Dimension(SieItem, frozen=True):
    TAG = "DIM"
    GROUP = Group.ACCOUNT
    FIELDS = (("no", uint32), ("name", text))

    no: int
    name: str


class DimensionObject(SieItem, frozen=True):
    """#OBJEKT: an object (cost centre, project, ...) within a dimension."""

    TAG = "OBJEKT"
    GROUP = Group.ACCOUNT
    FIELDS = (("dimension", uint32), ("no", text), ("name", text))

    dimension: int
    no: str
    name: str


# =============================================================================
# Balances and entries
# =============================================================================

_BALANCE_FIELDS: tuple[tuple[str, Decoder], ...] = (
    ("year", int32),
    ("account", uint32),
    ("balance", amount),
    ("quantity", optional_text),
)

_PERIOD_FIELDS: tuple[tuple[str, Decoder], ...] = (
    ("year", int32),
    ("period", int32),
    ("account", uint32),
    ("objects", list_of(text)),
    ("balance", amount),
    ("quantity", optional_text),
)


class OpeningBalance(SieItem, frozen=True):
    """#IB: opening balance of a balance sheet account."""

    TAG = "IB"
    GROUP = Group.BALANCE
    FIELDS = _BALANCE_FIELDS

    year: int
    account: int
    balance: Decimal
    quantity: str | None = None


class ClosingBalance(SieItem, frozen=True):
    """#UB: closing balance of a balance sheet account."""

    TAG = "UB"
    GROUP = Group.BALANCE
    FIELDS = _BALANCE_FIELDS

    year: int
    account: int
    balance: Decimal
    quantity: str | None = None


class ResultBalance(SieItem, frozen=True):
    """#RES: balance of a result account."""

    TAG = "RES"
    GROUP = Group.BALANCE
    FIELDS = _BALANCE_FIELDS

    year: int
    account: int
    balance: Decimal
    quantity: str | None = None


class PeriodBalance(SieItem, frozen=True):
    """#PSALDO: balance of an account for one period (YYYYMM)."""

    TAG = "PSALDO"
    GROUP = Group.BALANCE
    FIELDS = _PERIOD_FIELDS

    year: int
    period: int
    account: int
    objects: list[str] = Field(default_factory=list)
    balance: Decimal
    quantity: str | None = None


class PeriodBudget(SieItem, frozen=True):
    """#PBUDGET: budget of an account for one period (YYYYMM)."""

    TAG = "PBUDGET"
    GROUP = Group.BALANCE
    FIELDS = _PERIOD_FIELDS

    year: int
    period: int
    account: int
    objects: list[str] = Field(default_factory=list)
    balance: Decimal
    quantity: str | None = None


class Transaction(SieItem, frozen=True):
    """#TRANS: one row of an entry."""

    TAG = "TRANS"
    GROUP = Group.BALANCE
    FIELDS = (
        ("account", uint32),
        ("objects", list_of(text)),
        ("amount", amount),
        ("date", optional_date),
        ("text", optional_text),
        ("quantity", optional_text),
        ("signature", optional_text),
    )

    account: int
    objects: list[str] = Field(default_factory=list)
    amount: Decimal
    date: dt.date | None = None
    text: str | None = None
    quantity: str | None = None
    signature: str | None = None


class Entry(SieItem, frozen=True):
    """#VER: a verification (journal entry) with its transactions."""

    TAG = "VER"
    GROUP = Group.BALANCE
    FIELDS = (
        ("series", text),
        ("no", uint32),
        ("date", date),
        ("text", optional_text),
        ("reg_date", optional_date),
        ("sign", optional_text),
        ("transactions", sub_items(Transaction)),
    )

    series: str
    no: int
    date: dt.date
    text: str | None = None
    reg_date: dt.date | None = None
    sign: str | None = None
    transactions: list[Transaction] = Field(default_factory=list)


Item = Union[
    Flag,
    Program,
    Format,
    GeneratedInfo,
    SieType,
    Comment,
    CompanyType,
    CompanyId,
    OrganizationNumber,
    IndustryCode,
    Address,
    CompanyName,
    FinancialYear,
    TaxYear,
    BalanceDate,
    ChartType,
    Currency,
    Account,
    AccountType,
    AccountUnit,
    SruCode,
    Dimension,
    DimensionObject,
    OpeningBalance,
    ClosingBalance,
    ResultBalance,
    PeriodBalance,
    PeriodBudget,
    Entry,
    Transaction,
]

ITEM_KINDS: tuple[type[SieItem], ...] = (
    Flag,
    Program,
    Format,
    GeneratedInfo,
    SieType,
    Comment,
    CompanyType,
    CompanyId,
    OrganizationNumber,
    IndustryCode,
    Address,
    CompanyName,
    FinancialYear,
    TaxYear,
    BalanceDate,
    ChartType,
    Currency,
    Account,
    AccountType,
    AccountUnit,
    SruCode,
    Dimension,
    DimensionObject,
    OpeningBalance,
    ClosingBalance,
    ResultBalance,
    PeriodBalance,
    PeriodBudget,
    Entry,
    Transaction,
)
