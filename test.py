import pandas as pd
from src.querystats.engines.duckdb import DuckDBEngine
from src.querystats.collectors.top_queries import TopQueriesCollector
from src.querystats.config.settings import CollectorSettings
from src.querystats.context import ScrapeContext
from src.querystats.instance import DatabaseInstance

# 1) set-up tiny copies of the statistics views
eng = DuckDBEngine()
eng.connection.execute("""
CREATE SCHEMA s;
CREATE TABLE s.statements(userid BIGINT, dbid BIGINT, queryid BIGINT, query TEXT, calls BIGINT,
                          total_exec_time DOUBLE, mean_exec_time DOUBLE, min_exec_time DOUBLE, max_exec_time DOUBLE);
CREATE TABLE s.roles(oid BIGINT, rolname TEXT);
INSERT INTO s.roles VALUES (10, 'app');
""")
eng.append_dataframe("s.statements", pd.DataFrame({
    "userid": [10, 10], "dbid": [1, 1], "queryid": [42, 43],
    "query": ["SELECT 1", "SELECT 2"], "calls": [7, 1],
    "total_exec_time": [150000.0, 20.0], "mean_exec_time": [None, 20.0],
    "min_exec_time": [10000.0, 20.0], "max_exec_time": [90000.0, 20.0],
}, dtype=object))

# 2) run the top-queries collector once
settings = CollectorSettings(statements_relation="s.statements", roles_relation="s.roles",
                             label_scope="statement_text_user")
samples = []
class _Sink:
    def put(self, item): samples.append(item)

TopQueriesCollector.from_settings(settings).update(ScrapeContext(), DatabaseInstance(eng), _Sink())
for s in samples:
    print(s.descriptor.fq_name, s.labels, s.value)
