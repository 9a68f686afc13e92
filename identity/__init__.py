"""
Identity and verification engine.

Registers users, proves control of their e-mail address with a one-time
code, and issues/verifies stateless session tokens. The main entry point is
:class:`identity.accounts.AccountService`; :func:`identity.factory.create_web_app`
wires it to concrete stores and exposes it over HTTP.
"""
