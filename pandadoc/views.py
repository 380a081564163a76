"""
Flask webhook endpoint for PandaDoc document events.

Subclass ``PandaDocWebhookView``, implement the two callbacks and
register the view on your app or blueprint:

    class PandaDocWebhook(PandaDocWebhookView):
        def handle_document_change(self, document_id, status, details):
            Document.query.filter_by(pandadoc_id=document_id).update({'status': status})
            db.session.commit()

        def handle_document_complete(self, document_id, pdf, status, details):
            storage.save(f'{document_id}.pdf', pdf)

    register_webhook(app, '/callbacks/pandadoc', PandaDocWebhook, client=client)

Then configure https://yourdomain.com/callbacks/pandadoc as the webhook
URL in the PandaDoc portal.

Callbacks run in background threads, outside the request context.
"""

from flask import request
from flask.views import MethodView

from .client import PandaDocClient
from .webhook import WebhookDispatcher, WebhookHandler


class PandaDocWebhookView(WebhookHandler, MethodView):
    """
    Receive webhooks from PandaDoc.

    Answers 200 as soon as the events are scheduled, or 406 when the
    body is not a PandaDoc event batch.
    """

    methods = ['POST']

    def __init__(self, client=None, settings=None, **dispatcher_options):
        if client is None:
            client = PandaDocClient(settings) if settings is not None else PandaDocClient.from_env()
        self.client = client
        self.dispatcher = WebhookDispatcher(
            client, self, settings or client.settings, **dispatcher_options
        )

    def post(self):
        payload = request.get_json(silent=True)

        if not self.dispatcher.dispatch(payload):
            return '', 406

        return '', 200


def register_webhook(
    app_or_blueprint,
    rule: str,
    view_class,
    client=None,
    settings=None,
    endpoint: str = 'pandadoc_webhook',
    **dispatcher_options
):
    """
    Mount ``view_class`` at ``rule`` on a Flask app or blueprint.

    A single client is created up front and shared by every request.
    """
    if client is None:
        client = PandaDocClient(settings) if settings is not None else PandaDocClient.from_env()

    view = view_class.as_view(endpoint, client=client, settings=settings, **dispatcher_options)
    app_or_blueprint.add_url_rule(rule, view_func=view, methods=['POST'])
    return view
