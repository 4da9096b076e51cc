"""
Test suite for AuthContext.
"""

from sharespider.auth import AuthContext


class TestAuthContext:
    """Tests for AuthContext helpers"""

    def test_defaults_are_anonymous(self):
        auth = AuthContext()
        assert auth.is_anonymous
        assert not auth.use_kerberos
        assert auth.timeout == 10

    def test_password_is_not_anonymous(self):
        assert not AuthContext(username="alice", password="x").is_anonymous

    def test_aes_key_implies_kerberos(self):
        assert AuthContext(username="alice", aes_key="00" * 16).use_kerberos

    def test_lm_nt_hashes(self):
        auth = AuthContext(hashes="aad3b435b51404eeaad3b435b51404ee:31d6cfe0d16ae931b73c59d7e0c089c0")
        assert auth.ntlm_hashes() == ("aad3b435b51404eeaad3b435b51404ee", "31d6cfe0d16ae931b73c59d7e0c089c0")

    def test_nt_only_hash(self):
        assert AuthContext(hashes="31d6cfe0d16ae931b73c59d7e0c089c0").ntlm_hashes() == (
            "",
            "31d6cfe0d16ae931b73c59d7e0c089c0",
        )

    def test_no_hashes(self):
        assert AuthContext(password="x").ntlm_hashes() == ("", "")

    def test_repr_masks_secrets(self):
        text = repr(AuthContext(username="alice", password="Passw0rd!"))
        assert "Passw0rd!" not in text
        assert "alice" in text
