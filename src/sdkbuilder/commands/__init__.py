"""Built-in CLI sub-commands for sdkbuilder.

* :mod:`~sdkbuilder.commands.endpoints` -- list the endpoints of a file.
* :mod:`~sdkbuilder.commands.call` -- call one endpoint and print the result.
* :mod:`~sdkbuilder.commands.session` -- inspect and edit a file-backed
  session store.

Each module exports either a plain callback registered on the root app or a
:class:`typer.Typer` sub-application.
"""
