# cms_oauth_proxy/cli/__init__.py
