"""Typed payload models, one family per filing form."""

from .common import (
    PaymentAmount,
    PayloadModel,
    PersonAddress,
    PersonBase,
    SubmitterInfo,
    dump_payload,
    load_payload,
)
from .insurance import (
    AcquisitionPerson,
    AcquisitionType,
    CertificateCollection,
    InsuranceAcquisitionPayload,
    InsuranceLossPayload,
    LossPerson,
    LossReason,
    Remuneration,
)
from .dependents import (
    ChangeAfter,
    Declaration,
    DependentChangePayload,
    DependentEnd,
    DependentRecord,
    DependentStart,
    InsuredPerson,
    OtherDependent,
    OverseasException,
    OverseasExceptionStatus,
    SpouseDependent,
    SpouseRelationship,
)
from .changes import (
    AddressChangePayload,
    AddressChangePerson,
    NameChangePayload,
    NameChangePerson,
    SpouseAddressChange,
)
from .rewards import (
    BonusPaymentPayload,
    BonusPerson,
    PreviousStandardReward,
    RetroactivePayment,
    RewardBasePayload,
    RewardBasePerson,
    RewardChangePayload,
    RewardChangePerson,
    RewardPerson,
    SalaryChange,
    SalaryMonth,
)

__all__ = [
    "PaymentAmount",
    "PayloadModel",
    "PersonAddress",
    "PersonBase",
    "SubmitterInfo",
    "dump_payload",
    "load_payload",
    "AcquisitionPerson",
    "AcquisitionType",
    "CertificateCollection",
    "InsuranceAcquisitionPayload",
    "InsuranceLossPayload",
    "LossPerson",
    "LossReason",
    "Remuneration",
    "ChangeAfter",
    "Declaration",
    "DependentChangePayload",
    "DependentEnd",
    "DependentRecord",
    "DependentStart",
    "InsuredPerson",
    "OtherDependent",
    "OverseasException",
    "OverseasExceptionStatus",
    "SpouseDependent",
    "SpouseRelationship",
    "AddressChangePayload",
    "AddressChangePerson",
    "NameChangePayload",
    "NameChangePerson",
    "SpouseAddressChange",
    "BonusPaymentPayload",
    "BonusPerson",
    "PreviousStandardReward",
    "RetroactivePayment",
    "RewardBasePayload",
    "RewardBasePerson",
    "RewardChangePayload",
    "RewardChangePerson",
    "RewardPerson",
    "SalaryChange",
    "SalaryMonth",
]
