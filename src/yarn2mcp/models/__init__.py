"""Typed record models shared by the matcher, namer and publisher."""
