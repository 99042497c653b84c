import asyncio

import pytest

from esign.engine.errors import UploadRejected
from esign.engine.geometry import Point, Rect
from esign.engine.placement import MoveDrop
from esign.engine.session import DispatchResult, WizardSession
from esign.engine.state import ExternalRef, FieldType, ReferenceKind, SignerCandidate, WizardStep
from esign.engine.views import FieldsStep, ReviewStep, SentStep, SignersStep, UploadStep, validate_upload

PAGE = Rect(0, 0, 1000, 1000)


def _place(field_type):
    return {"kind": "place", "field_type": field_type.value}


@pytest.fixture
def uploaded(wizard, lease_upload):
    UploadStep(wizard).accept(lease_upload, "preview-token")
    return wizard


@pytest.fixture
def with_signers(uploaded, alice, bob):
    step = SignersStep(uploaded)
    assert step.save(alice)
    assert step.save(bob)
    return uploaded


@pytest.mark.parametrize(
    "filename,content_type,size",
    [
        ("", "application/pdf", 10),
        ("photo.png", "image/png", 10),
        ("lease.pdf", "application/pdf", 0),
    ],
)
def test_validate_upload_rejections(filename, content_type, size):
    with pytest.raises(UploadRejected) as excinfo:
        validate_upload(filename, content_type, size)
    assert not excinfo.value.too_large


def test_validate_upload_size_limit():
    with pytest.raises(UploadRejected) as excinfo:
        validate_upload("lease.pdf", "application/pdf", 11, max_bytes=10)
    assert excinfo.value.too_large
    validate_upload("lease.docx", "application/octet-stream", 10, max_bytes=10)


def test_upload_step_rejects_without_touching_state(wizard, lease_upload):
    step = UploadStep(wizard, max_bytes=100)
    with pytest.raises(UploadRejected):
        step.accept(lease_upload, "t")
    assert wizard.state.document is None
    assert not step.can_continue
    assert not step.next()


def test_upload_step_rename_and_remove(uploaded):
    step = UploadStep(uploaded)
    assert not step.rename("  ")
    assert uploaded.state.document.name == "Lease Agreement"
    assert step.rename("Unit 7 lease", "Renewal")
    assert uploaded.state.document.name == "Unit 7 lease"
    assert step.next()
    assert uploaded.state.step == WizardStep.SIGNERS
    step.remove_file()
    assert uploaded.state.document is None


def test_save_rejects_blank_and_duplicate(uploaded, alice):
    step = SignersStep(uploaded)
    assert not step.save(SignerCandidate(name=" ", email="x@example.com"))
    assert step.save(alice)
    assert not step.save(alice.model_copy(update={"name": "Other Alice"}))
    assert len(uploaded.state.signers) == 1


def test_save_edits_in_place(with_signers, alice, bob):
    step = SignersStep(with_signers)
    assert step.save(alice.model_copy(update={"phone": "555-0101"}), editing_index=0)
    assert with_signers.state.signers[0].phone == "555-0101"
    assert not step.save(alice.model_copy(update={"email": bob.email}), editing_index=0)
    assert not step.save(alice, editing_index=9)


def test_toggle_known_participant(uploaded):
    tenant = SignerCandidate(
        name="Tara Tenant",
        email="tara@example.com",
        reference=ExternalRef(kind=ReferenceKind.TENANT, id="7"),
    )
    step = SignersStep(uploaded, directory=[tenant])
    assert step.toggle_known(tenant, True)
    assert not step.toggle_known(tenant, True)
    assert step.is_selected(tenant)
    assert step.known() == ((tenant, True),)

    # matched by reference even after the e-mail was edited
    step.save(tenant.model_copy(update={"email": "tara@new.example.com"}), editing_index=0)
    assert step.is_selected(tenant)
    assert step.toggle_known(tenant, False)
    assert uploaded.state.signers == ()
    assert not step.toggle_known(tenant, False)


def test_fields_step_active_signer(with_signers):
    view = FieldsStep(with_signers)
    assert view.active_signer == "alice@example.com"
    assert not view.choose_signer("nobody@example.com")
    assert view.choose_signer("bob@example.com")
    assert view.active_signer == "bob@example.com"

    SignersStep(with_signers).remove(1)
    assert view.active_signer == "alice@example.com"


def test_fields_step_pages(with_signers):
    view = FieldsStep(with_signers)
    assert view.page_count == 3
    assert view.go_to_page(7) == 3
    assert view.go_to_page(0) == 1


def test_drop_places_on_current_page_and_selects(with_signers):
    view = FieldsStep(with_signers)
    view.go_to_page(2)
    assert view.drop(_place(FieldType.SIGNATURE), Point(100, 200), PAGE)
    field = view.selected_field
    assert field.page == 2
    assert (field.x, field.y) == (10.0, 20.0)
    assert view.visible_fields() == ((0, field),)


def test_drop_ignores_malformed_geometry(with_signers):
    view = FieldsStep(with_signers)
    assert not view.drop(_place(FieldType.DATE), Point(1, 1), Rect(0, 0, 0, 0))
    assert with_signers.state.fields == ()


def test_move_drop_selects_moved_field(with_signers):
    view = FieldsStep(with_signers)
    view.drop(_place(FieldType.SIGNATURE), Point(100, 100), PAGE)
    view.drop(_place(FieldType.DATE), Point(100, 500), PAGE)
    assert view.selected_index == 1
    assert view.drop(MoveDrop(index=0), Point(700, 700), PAGE)
    assert view.selected_index == 0
    assert (with_signers.state.fields[0].x, with_signers.state.fields[0].y) == (70.0, 70.0)


def test_selection_follows_field_and_clears_on_removal(with_signers):
    view = FieldsStep(with_signers)
    view.drop(_place(FieldType.SIGNATURE), Point(100, 100), PAGE)
    view.drop(_place(FieldType.DATE), Point(100, 500), PAGE)
    view.remove(0)
    assert view.selected_index == 0
    assert view.remove_selected()
    assert view.selected_index is None
    assert not view.remove_selected()


def test_select_by_index(with_signers):
    view = FieldsStep(with_signers)
    view.drop(_place(FieldType.SIGNATURE), Point(100, 100), PAGE)
    view.select(None)
    assert view.selected_field is None
    view.select(0)
    assert view.selected_field == with_signers.state.fields[0]
    view.select(5)
    assert view.selected_index is None


def test_selection_clears_when_document_changes(with_signers, lease_upload):
    view = FieldsStep(with_signers)
    view.go_to_page(3)
    view.drop(_place(FieldType.SIGNATURE), Point(100, 100), PAGE)
    UploadStep(with_signers).accept(lease_upload.model_copy(update={"ref": "drafts/test/new.pdf"}), "t2")
    assert view.selected_index is None
    assert view.current_page == 1


def test_adjust_resizes_selected_field(with_signers):
    view = FieldsStep(with_signers)
    view.drop(_place(FieldType.TEXTBOX), Point(100, 100), PAGE)
    view.adjust(0, width=150, height=0.5)
    field = with_signers.state.fields[0]
    assert (field.width, field.height) == (100, 1)
    assert field.type == FieldType.TEXTBOX


def test_fields_step_continue_needs_every_signer(with_signers):
    view = FieldsStep(with_signers)
    view.drop(_place(FieldType.SIGNATURE), Point(100, 100), PAGE)
    assert not view.can_continue
    view.choose_signer("bob@example.com")
    view.drop(_place(FieldType.DATE), Point(100, 300), PAGE)
    assert view.can_continue
    assert view.next()
    assert view.back()
    assert with_signers.state.step == WizardStep.SIGNERS


def _to_review(session):
    view = FieldsStep(session)
    for email in ("alice@example.com", "bob@example.com"):
        view.choose_signer(email)
        view.drop(_place(FieldType.SIGNATURE), Point(100, 100), PAGE)
    assert session.set_step(WizardStep.REVIEW)
    return ReviewStep(session)


def test_review_step_edit_only_goes_back(with_signers):
    review = _to_review(with_signers)
    assert not review.edit(WizardStep.SENT)
    assert not review.edit(WizardStep.REVIEW)
    assert review.edit(WizardStep.SIGNERS)
    assert with_signers.state.step == WizardStep.SIGNERS


def test_review_send_and_sent_step(with_signers):
    review = _to_review(with_signers)
    review.set_message("Please sign by Friday")
    assert review.summary().message == "Please sign by Friday"

    async def dispatcher(request):
        return DispatchResult(reference="42")

    assert asyncio.run(review.send(dispatcher))
    sent = SentStep(with_signers)
    assert sent.reference == "42"
    assert sent.recipients() == (("Alice Tenant", "alice@example.com"), ("Bob Landlord", "bob@example.com"))
    sent.start_over()
    assert with_signers.state.step == WizardStep.UPLOAD
    assert sent.reference is None


def test_review_suggest_message_uses_template(with_signers):
    review = _to_review(with_signers)
    assert asyncio.run(review.suggest_message())
    assert with_signers.state.message.startswith("Hi Alice and Bob,")


def test_review_error_can_be_dismissed(with_signers):
    review = _to_review(with_signers)

    async def dispatcher(request):
        return False

    assert not asyncio.run(review.send(dispatcher))
    assert review.error
    review.dismiss_error()
    assert review.error is None
    assert review.can_send
