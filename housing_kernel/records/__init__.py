"""
Flat-record codecs.

Each codec maps one entity type to the pipe-delimited columns of one
table.  Shared escaping and packing rules live in ``codec``.
"""

from housing_kernel.records.application_codec import ApplicationCodec, ReceiptCodec
from housing_kernel.records.codec import RecordCodec
from housing_kernel.records.enquiry_codec import EnquiryCodec
from housing_kernel.records.person_codec import PERSON_TABLES, PersonCodec
from housing_kernel.records.project_codec import ProjectCodec
from housing_kernel.records.registration_codec import RegistrationCodec

__all__ = [
    "ApplicationCodec",
    "EnquiryCodec",
    "PERSON_TABLES",
    "PersonCodec",
    "ProjectCodec",
    "ReceiptCodec",
    "RecordCodec",
    "RegistrationCodec",
]
