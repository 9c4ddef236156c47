"""
Pages reachable without signing in
"""
