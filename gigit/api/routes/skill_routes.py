"""
Skill Routes

GET /skills - Skill catalog, filterable by category and name
GET /skills/categories - Distinct skill categories
"""

from fastapi import APIRouter, Query
from typing import List, Optional

from gigit.db.database import LIKE_ESCAPE, contains_pattern, execute_raw_sql
from gigit.schemas.schemas import SkillResponse

router = APIRouter(prefix="/skills", tags=["Skills"])


@router.get("", response_model=List[SkillResponse])
async def list_skills(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search in skill name")
):
    sql = "SELECT id, name, category FROM skills WHERE 1=1"
    params = {}

    if category:
        sql += " AND category = :category"
        params["category"] = category
    if search:
        sql += " AND LOWER(name) LIKE LOWER(:search)" + LIKE_ESCAPE
        params["search"] = contains_pattern(search)

    sql += " ORDER BY category, name"
    return [SkillResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/categories", response_model=List[str])
async def list_categories():
    rows = execute_raw_sql("SELECT DISTINCT category FROM skills ORDER BY category")
    return [r["category"] for r in rows]
