from schemas.application import ApplicationCreate, DocumentAttachmentIn
from services import applications, documents
from services.assembler import assemble_application
from services.errors import InvalidTransitionError, NotFoundError, ValidationError
from tests.support import DatabaseTestCase, application_payload


class TestDocumentTracker(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        loan = await self.make_loan()
        payload = application_payload(
            loan.id,
            documents=[
                {"type": "Selfie", "name": "me.jpg", "url": "/uploads/me.jpg"},
                {"type": "PAN Card", "name": "pan.jpg", "url": "/uploads/pan.jpg"},
            ],
        )
        self.app = await assemble_application(self.session, ApplicationCreate.model_validate(payload))
        self.selfie, self.pan = self.app.documents

    async def test_documents_start_pending_in_submission_order(self):
        docs = await documents.list_documents(self.session, self.app.id)
        self.assertEqual([(d.type, d.status, d.position) for d in docs], [("Selfie", "Pending", 0), ("PAN Card", "Pending", 1)])

    async def test_verify_and_reject_are_independent_of_application_status(self):
        await documents.verify_document(self.session, self.app.id, self.selfie.id)
        rejected = await documents.reject_document(self.session, self.app.id, self.pan.id, "Blurry scan")
        self.assertEqual(rejected.status, "Rejected")
        self.assertEqual(rejected.remarks, "Blurry scan")
        app = await applications.get_application(self.session, self.app.id)
        self.assertEqual(app.status, "Submitted")

    async def test_decided_document_does_not_flip(self):
        await documents.reject_document(self.session, self.app.id, self.pan.id)
        with self.assertRaises(InvalidTransitionError):
            await documents.verify_document(self.session, self.app.id, self.pan.id)
        again = await documents.reject_document(self.session, self.app.id, self.pan.id, "late remark")
        self.assertEqual(again.status, "Rejected")
        self.assertIsNone(again.remarks)

    async def test_application_decision_leaves_documents_alone(self):
        await applications.approve_application(self.session, self.app.id)
        docs = await documents.list_documents(self.session, self.app.id)
        self.assertEqual({d.status for d in docs}, {"Pending"})

    async def test_attach_appends_while_open(self):
        doc = await documents.attach_document(
            self.session, self.app.id, DocumentAttachmentIn(type="Bank Statement", name="st.pdf", url="/uploads/st.pdf")
        )
        self.assertEqual((doc.position, doc.status), (2, "Pending"))

    async def test_attach_refused_after_decision(self):
        await applications.reject_application(self.session, self.app.id, "Incomplete KYC")
        with self.assertRaises(ValidationError):
            await documents.attach_document(
                self.session, self.app.id, DocumentAttachmentIn(type="Selfie", name="x.jpg", url="/uploads/x.jpg")
            )

    async def test_document_of_other_application_is_not_found(self):
        with self.assertRaises(NotFoundError):
            await documents.verify_document(self.session, "app-other", self.pan.id)
