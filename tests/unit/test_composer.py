"""Tests for multisig approval composition against the in-memory node."""

import pytest

from appchain_client.runtime.errors import CompositionError, ErrorCode
from appchain_client.tx.authority import Actor, Authority
from appchain_client.tx.calls import ApproveAsMulti, AsMulti, AsMultiThreshold1, BatchAll, OnBehalf
from appchain_client.tx.composer import ApprovalStage
from appchain_client.tx.operations import UpdateDao
from appchain_client.tx.sequencer import SubmissionStatus

from helpers.factories import mk_create_dao, mk_key_dao


@pytest.fixture
def alice(ctx):
    return mk_key_dao(ctx, "Alice", 0xA1)


@pytest.fixture
def bob(ctx):
    return mk_key_dao(ctx, "Bob", 0xB0)


@pytest.fixture
def charlie(ctx):
    return mk_key_dao(ctx, "Charlie", 0xC4)


def pair(*members, threshold):
    return Authority(signatories=[m.address for m in members], threshold=threshold)


class TestSingleKey:

    def test_single_key_dao_needs_no_layer(self, ctx, alice):
        composed = ctx.composer.compose(UpdateDao(metadata="0x01"), alice, [alice.key])

        assert composed.layers == []
        assert composed.executes
        assert composed.signer == alice.key
        assert isinstance(composed.call, BatchAll)
        assert composed.call.calls[0] == OnBehalf(alice.dao_id, composed.call.calls[0].call)

        ctx.sequencer.execute(composed).raise_for_status()
        assert ctx.client.get_account(alice.dao_id)["metadata"] == "0x01"

    def test_leading_acting_dao_is_skipped(self, ctx, alice):
        operation = UpdateDao(metadata="0x02")
        via_dao = ctx.composer.compose(operation, alice, [alice])
        via_key = ctx.composer.compose(operation, alice, [alice.key])

        assert via_dao.call == via_key.call
        assert via_dao.signer == alice.key

    def test_path_must_end_in_key(self, ctx, alice, bob):
        group = Actor(dao_id="0x" + "42" * 20, authority=pair(alice, bob, threshold=1))

        with pytest.raises(CompositionError) as exc_info:
            ctx.composer.compose(UpdateDao(), group.authority, [group])
        assert exc_info.value.code == ErrorCode.INVALID_APPROVAL_PATH

        with pytest.raises(CompositionError):
            ctx.composer.compose(UpdateDao(), alice, [])

    def test_key_only_at_end_of_path(self, ctx, alice, bob):
        with pytest.raises(CompositionError) as exc_info:
            ctx.composer.compose(UpdateDao(), Authority.single(alice.key), [alice.key, bob])
        assert exc_info.value.code == ErrorCode.INVALID_APPROVAL_PATH

    def test_non_member_is_rejected(self, ctx, alice, bob, charlie):
        with pytest.raises(CompositionError) as exc_info:
            ctx.composer.compose(mk_create_dao(pair(alice, bob, threshold=2)), pair(alice, bob, threshold=2),
                                 [charlie])
        assert exc_info.value.code == ErrorCode.INVALID_AUTHORITY


class TestThresholdLayers:

    def test_threshold_one_executes_in_one_shot(self, ctx, alice, bob):
        authority = pair(alice, bob, threshold=1)
        create = mk_create_dao(authority)

        composed = ctx.composer.compose(create, authority, [bob])

        assert [layer.stage for layer in composed.layers] == [ApprovalStage.SINGLE_SHOT]
        assert composed.executes
        outer = composed.call.calls[0]
        assert isinstance(outer, OnBehalf) and outer.dao_id == bob.dao_id
        assert isinstance(outer.call, AsMultiThreshold1)
        assert outer.call.other_signatories == (alice.address,)

        ctx.sequencer.execute(composed, expect=ctx.dao_exists(create.dao_id)).raise_for_status()
        assert ctx.client.get_account(create.dao_id)["authority"]["threshold"] == 1

    def test_two_of_two_first_then_final(self, ctx, alice, bob):
        authority = pair(alice, bob, threshold=2)
        create = mk_create_dao(authority)

        first = ctx.composer.compose(create, authority, [alice])
        layer = first.layers[0]
        assert layer.stage is ApprovalStage.FIRST
        assert layer.timepoint is None
        assert layer.group_account == authority.account
        assert not first.executes
        assert isinstance(first.call.calls[0].call, ApproveAsMulti)

        ctx.sequencer.execute(first).raise_for_status()
        record = ctx.client.get_multisig(authority.account, layer.call_hash)
        assert record is not None
        assert record.has_approved(alice.address)
        assert ctx.client.get_account(create.dao_id) is None

        final = ctx.composer.compose(create, authority, [bob])
        final_layer = final.layers[0]
        assert final_layer.stage is ApprovalStage.FINAL
        assert final_layer.timepoint == record.when
        assert final_layer.weight > 0
        assert final.executes
        assert isinstance(final.call.calls[0].call, AsMulti)

        ctx.sequencer.execute(final, expect=ctx.dao_exists(create.dao_id)).raise_for_status()
        assert ctx.client.get_account(create.dao_id) is not None
        assert ctx.client.get_multisig(authority.account, layer.call_hash) is None

    def test_weight_is_estimated_against_group_account(self, ctx, node, alice, bob, charlie):
        group = ctx.create_group_dao("Alice-Bob", [alice, bob], 1, [[alice]])
        authority = Authority(signatories=[group.address, charlie.address], threshold=2)
        create = mk_create_dao(authority)
        node.dry_run_signers.clear()

        ctx.composer.compose(create, authority, [group, alice])

        assert node.dry_run_signers == [authority.account]
        assert authority.account not in (group.address, alice.address, alice.key.address)

    def test_three_of_three_has_intermediate_stage(self, ctx, alice, bob, charlie):
        authority = pair(alice, bob, charlie, threshold=3)
        create = mk_create_dao(authority)

        stages = []
        for member in (alice, bob, charlie):
            composed = ctx.composer.compose(create, authority, [member])
            stages.append(composed.layers[0].stage)
            expect = ctx.dao_exists(create.dao_id) if composed.executes else None
            ctx.sequencer.execute(composed, expect=expect).raise_for_status()

        assert stages == [ApprovalStage.FIRST, ApprovalStage.INTERMEDIATE, ApprovalStage.FINAL]
        assert ctx.client.get_account(create.dao_id) is not None

    def test_vanished_record_fails_and_restarts(self, ctx, node, alice, bob):
        authority = pair(alice, bob, threshold=2)
        create = mk_create_dao(authority)
        first = ctx.composer.compose(create, authority, [alice])
        ctx.sequencer.execute(first).raise_for_status()

        final = ctx.composer.compose(create, authority, [bob])
        assert final.layers[0].stage is ApprovalStage.FINAL
        node.expire_multisig(authority.account, first.layers[0].call_hash)

        result = ctx.sequencer.execute(final, expect=ctx.dao_exists(create.dao_id))

        assert result.status is SubmissionStatus.INCLUDED_FAILURE
        assert node.failures()[-1]["error"] == "multisig.UnexpectedTimepoint"
        assert ctx.client.get_account(create.dao_id) is None
        assert ctx.composer.compose(create, authority, [bob]).layers[0].stage is ApprovalStage.FIRST

    def test_duplicate_approval_is_refused(self, ctx, alice, bob):
        authority = pair(alice, bob, threshold=2)
        create = mk_create_dao(authority)
        ctx.sequencer.execute(ctx.composer.compose(create, authority, [alice])).raise_for_status()

        with pytest.raises(CompositionError) as exc_info:
            ctx.composer.compose(create, authority, [alice])
        assert exc_info.value.code == ErrorCode.DUPLICATE_APPROVAL

    def test_nested_layers_are_innermost_first(self, ctx, alice, bob, charlie):
        group = ctx.create_group_dao("Alice-Bob", [alice, bob], 1, [[alice]])
        authority = Authority(signatories=[group.address, charlie.address], threshold=2)
        create = mk_create_dao(authority)

        composed = ctx.composer.compose(create, authority, [group, alice])

        assert [layer.stage for layer in composed.layers] == [ApprovalStage.FIRST, ApprovalStage.SINGLE_SHOT]
        assert composed.pending_layer.member_address == group.address
        assert composed.signer == alice.key

        outer = composed.call.calls[0]
        assert outer.dao_id == alice.dao_id
        assert isinstance(outer.call, AsMultiThreshold1)
        assert outer.call.call.dao_id == group.dao_id
        assert isinstance(outer.call.call.call, ApproveAsMulti)

        ctx.sequencer.execute(composed).raise_for_status()
        record = ctx.client.get_multisig(authority.account, composed.layers[0].call_hash)
        assert record.has_approved(group.address)
