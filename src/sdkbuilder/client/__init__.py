"""HTTP side of sdkbuilder: URLs, payload encoding, dispatch, and responses.

Modules:
    forms: :class:`FileUpload` and :class:`FormData` payload values.
    urls: Base/template joining and ``:name`` placeholder substitution.
    encoding: Query-string, JSON, and multipart encoding.
    dispatcher: Header merge, bearer injection, and the network call.
    response: Body parsing and :class:`~sdkbuilder.models.ResponseEnvelope`
        construction.
    interceptor: The HTTP 401 callback hook.

Example::

    from sdkbuilder.client import FileUpload

    await api.fetch.files.upload({"file": FileUpload("a.txt", b"hello")})
"""

from sdkbuilder.client.forms import FileUpload, FormData

__all__ = ["FileUpload", "FormData"]
