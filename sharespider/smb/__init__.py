"""SMB connectivity and share listing for sharespider.

Modules:
    connection: impacket-backed transport (connect, login, shares, trees)
    exceptions: Error taxonomy shared by the transport and the engine
    tree: Tree lister and permission reader
"""
