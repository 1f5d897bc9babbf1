"""Default configuration template.

This template is written to ~/.config/facteur/config.toml
when running `facteur config init`.
"""

CONFIG_TEMPLATE = """\
# Facteur Configuration

[defaults]
range = 10
timeout = 30

# Add your POP3 accounts below.
# Example account using implicit TLS (port 995):
#
# [accounts.personal]
# host = "pop.example.com"
# username = "alice@example.com"
# ssl = true
#
# Example account upgrading a plain connection with STLS (port 110):
#
# [accounts.work]
# host = "mail.example.org"
# port = 110
# username = "alice"
# tls = true
#
# For the password, use the FACTEUR_POP3_PASSWORD environment variable,
# or add password = "..." to the account (the file is readable only by you).
"""
