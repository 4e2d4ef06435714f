"""Database bootstrap: name derivation, SQL text and the provisioning run."""
