"""
Transaction building, composition and submission.
"""

from .authority import Actor, Authority
from .operations import *
from .calls import (
    Timepoint,
    MultisigRecord,
    Call,
    Direct,
    OnBehalf,
    AsMultiThreshold1,
    ApproveAsMulti,
    AsMulti,
    BatchAll,
    as_call,
    batch_all,
)
from .extrinsic import SignedExtrinsic, sign_extrinsic, unsigned_extrinsic, decode_extrinsic, verify_extrinsic
from .composer import ApprovalStage, ApprovalLayer, ComposedTransaction, TransactionComposer
from .sequencer import SubmissionStatus, SubmissionResult, ApprovalSequencer
