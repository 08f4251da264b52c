"""Core translation pipeline and backends"""
