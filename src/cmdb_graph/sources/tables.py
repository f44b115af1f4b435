"""Table and field names of the CMDB relationship model."""

CI_TABLE = "cmdb_ci"
REL_TABLE = "cmdb_rel_ci"

CI_FIELDS = ["sys_id", "name", "sys_class_name"]
REL_FIELDS = ["sys_id", "parent", "child", "type"]

__all__ = ["CI_TABLE", "REL_TABLE", "CI_FIELDS", "REL_FIELDS"]
