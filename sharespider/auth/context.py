# Authentication context dataclass.
#
# Bundles the credential parameters handed to the SMB transport so the
# orchestrator does not have to thread them through individually.
#
# Usage:
#     auth = AuthContext(
#         username="admin",
#         password="secret",
#         domain="CORP",
#     )
#     report = process_target(target, auth=auth, ...)

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class AuthContext:
    """
    Bundles all authentication-related parameters for a sharespider run.

    Attributes:
        username: Username for authentication (empty for a null session)
        password: Cleartext password
        domain: Domain name for authentication
        hashes: NTLM hashes in LMHASH:NTHASH format or NT-only (alternative to password)
        aes_key: AES key for Kerberos (implies Kerberos)
        kerberos: Use Kerberos authentication instead of NTLM
        dc_ip: Domain controller / KDC address for Kerberos
        timeout: Connection timeout in seconds
    """

    username: str = ""
    password: Optional[str] = None
    domain: str = ""
    hashes: Optional[str] = None
    aes_key: Optional[str] = None
    kerberos: bool = False
    dc_ip: Optional[str] = None
    timeout: int = 10

    @property
    def use_kerberos(self) -> bool:
        """Kerberos is used when requested explicitly or an AES key is supplied."""
        return self.kerberos or bool(self.aes_key)

    @property
    def is_anonymous(self) -> bool:
        """True for a null session (no username and no secret)."""
        return not self.username and not (self.password or self.hashes or self.aes_key or self.kerberos)

    def ntlm_hashes(self) -> Tuple[str, str]:
        """
        Split the configured hashes into (lmhash, nthash).

        Accepts 'lm:nt' or a bare 32-hex NT hash. Returns empty strings when
        no hashes are configured.
        """
        if not self.hashes:
            return "", ""
        if ":" in self.hashes:
            lm, nt = self.hashes.split(":", 1)
            return lm.strip(), nt.strip()
        return "", self.hashes.strip()

    def __repr__(self) -> str:
        # Keep secrets out of debug output and tracebacks
        secret = "***" if (self.password or self.hashes or self.aes_key) else None
        return (
            f"AuthContext(username={self.username!r}, domain={self.domain!r}, "
            f"secret={secret!r}, kerberos={self.use_kerberos}, timeout={self.timeout})"
        )
