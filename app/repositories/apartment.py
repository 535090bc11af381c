"""
Apartment repository for managing listings with search, filtering and statistics.
Provides the query building behind listing, owner listings, text search and stats.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, case, desc, asc, literal
from app.repositories.base import BaseRepository
from app.models.apartment import Apartment, PetPolicy
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


# Wire name of a sort key -> model column
SORT_FIELDS = {
    "price": Apartment.price,
    "bedrooms": Apartment.bedrooms,
    "bathrooms": Apartment.bathrooms,
    "squareFootage": Apartment.square_footage,
    "createdAt": Apartment.created_at,
    "unitName": Apartment.unit_name,
}

# Relevance weight per matched column in text search
TEXT_SEARCH_WEIGHTS = (
    (Apartment.unit_name, 3),
    (Apartment.project, 2),
    (Apartment.description, 1),
)


class ApartmentSearchFilters:
    """Data class for apartment listing filters."""

    def __init__(
        self,
        search: Optional[str] = None,
        unit_name: Optional[str] = None,
        unit_number: Optional[str] = None,
        project: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[float] = None,
        is_available: Optional[bool] = None,
        pet_policy: Optional[PetPolicy] = None,
        user_id: Optional[uuid.UUID] = None
    ):
        self.search = search
        self.unit_name = unit_name
        self.unit_number = unit_number
        self.project = project
        self.city = city
        self.state = state
        self.min_price = min_price
        self.max_price = max_price
        self.bedrooms = bedrooms
        self.bathrooms = bathrooms
        self.is_available = is_available
        self.pet_policy = pet_policy
        self.user_id = user_id


def _contains(column, value: str):
    return column.icontains(value, autoescape=True)


class ApartmentRepository(BaseRepository[Apartment]):
    """
    Repository for apartment listings.
    Every listing query returns a (rows, total) pair built from one condition list.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Apartment, db)

    async def create_apartment(self, apartment_data: Dict[str, Any]) -> Apartment:
        try:
            created = await self.create(apartment_data)
            logger.info(
                f"Created apartment: {created.unit_number} in {created.project} (ID: {created.id})"
            )
            return created
        except Exception as e:
            logger.error(f"Failed to create apartment: {e}")
            raise

    async def get_by_unit(
        self,
        unit_number: str,
        project: str,
        exclude_id: Optional[uuid.UUID] = None
    ) -> Optional[Apartment]:
        """
        Find the apartment holding a unit number within a project.

        Args:
            unit_number: Unit number to look up
            project: Project the unit belongs to
            exclude_id: Apartment to ignore (the one being updated)

        Returns:
            Apartment if the pair is taken, None otherwise
        """
        try:
            query = select(Apartment).where(
                and_(Apartment.unit_number == unit_number, Apartment.project == project)
            )
            if exclude_id is not None:
                query = query.where(Apartment.id != exclude_id)

            result = await self.db.execute(query.limit(1))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to look up unit {unit_number} in {project}: {e}")
            raise

    async def search_apartments(
        self,
        filters: ApartmentSearchFilters,
        skip: int = 0,
        limit: int = 10,
        sort_by: str = "createdAt",
        sort_order: str = "desc"
    ) -> Tuple[List[Apartment], int]:
        """
        List apartments with filtering, sorting and pagination.

        Args:
            filters: ApartmentSearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
            sort_by: Wire name of the sort field
            sort_order: 'asc' or 'desc'

        Returns:
            Tuple of (apartments list, total count)
        """
        try:
            query = select(Apartment)
            count_query = select(func.count(Apartment.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar() or 0

            query = query.order_by(*self._build_ordering(sort_by, sort_order))
            query = query.offset(skip).limit(limit)

            result = await self.db.execute(query)
            apartments = result.scalars().all()

            logger.debug(f"Apartment search returned {len(apartments)} of {total_count} total results")
            return list(apartments), total_count
        except Exception as e:
            logger.error(f"Failed to search apartments: {e}")
            raise

    def _build_filter_conditions(self, filters: ApartmentSearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from listing filters.
        Empty strings are treated as absent.
        """
        conditions = []

        if filters.search:
            conditions.append(
                or_(
                    _contains(Apartment.unit_name, filters.search),
                    _contains(Apartment.unit_number, filters.search),
                    _contains(Apartment.project, filters.search),
                    _contains(Apartment.description, filters.search),
                    _contains(Apartment.address, filters.search),
                    _contains(Apartment.city, filters.search),
                )
            )

        # Case-insensitive partial matches
        for column, value in (
            (Apartment.unit_name, filters.unit_name),
            (Apartment.unit_number, filters.unit_number),
            (Apartment.project, filters.project),
            (Apartment.city, filters.city),
            (Apartment.state, filters.state),
        ):
            if value:
                conditions.append(_contains(column, value))

        # Price range
        if filters.min_price is not None:
            conditions.append(Apartment.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Apartment.price <= filters.max_price)

        # Minimum rooms
        if filters.bedrooms is not None:
            conditions.append(Apartment.bedrooms >= filters.bedrooms)
        if filters.bathrooms is not None:
            conditions.append(Apartment.bathrooms >= filters.bathrooms)

        if filters.is_available is not None:
            conditions.append(Apartment.is_available == filters.is_available)

        if filters.pet_policy:
            conditions.append(Apartment.pet_policy == filters.pet_policy)

        if filters.user_id:
            conditions.append(Apartment.user_id == filters.user_id)

        return conditions

    @staticmethod
    def _build_ordering(sort_by: str, sort_order: str) -> List:
        column = SORT_FIELDS.get(sort_by, Apartment.created_at)
        direction = asc if sort_order.lower() == "asc" else desc
        return [direction(column), direction(Apartment.id)]

    async def get_apartments_by_owner(
        self,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 10,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        search: Optional[str] = None
    ) -> Tuple[List[Apartment], int]:
        """
        Get apartments listed by a specific user.

        Args:
            user_id: UUID of the owner
            skip: Number of records to skip
            limit: Maximum number of records to return
            sort_by: Wire name of the sort field
            sort_order: 'asc' or 'desc'
            search: Optional text matched across name, project, description, address and city

        Returns:
            Tuple of (apartments list, total count)
        """
        try:
            conditions = [Apartment.user_id == user_id]
            if search:
                conditions.append(
                    or_(
                        _contains(Apartment.unit_name, search),
                        _contains(Apartment.project, search),
                        _contains(Apartment.description, search),
                        _contains(Apartment.address, search),
                        _contains(Apartment.city, search),
                    )
                )

            count_result = await self.db.execute(
                select(func.count(Apartment.id)).where(and_(*conditions))
            )
            total_count = count_result.scalar() or 0

            query = (
                select(Apartment)
                .where(and_(*conditions))
                .order_by(*self._build_ordering(sort_by, sort_order))
                .offset(skip)
                .limit(limit)
            )
            result = await self.db.execute(query)
            apartments = result.scalars().all()

            logger.debug(f"Retrieved {len(apartments)} apartments for user {user_id}")
            return list(apartments), total_count
        except Exception as e:
            logger.error(f"Failed to get apartments by owner {user_id}: {e}")
            raise

    async def text_search(
        self,
        query_text: str,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Apartment], int]:
        """
        Search unit names, projects and descriptions, ranked by relevance.

        Each whitespace-separated term adds its column weight for every column
        it occurs in. Ties fall back to newest first.

        Returns:
            Tuple of (apartments list, total count)
        """
        try:
            terms = [term for term in query_text.split() if term]
            if not terms:
                return [], 0

            match_conditions = []
            score = literal(0)
            for term in terms:
                for column, weight in TEXT_SEARCH_WEIGHTS:
                    condition = _contains(column, term)
                    match_conditions.append(condition)
                    score = score + case((condition, weight), else_=0)

            where_clause = or_(*match_conditions)

            count_result = await self.db.execute(
                select(func.count(Apartment.id)).where(where_clause)
            )
            total_count = count_result.scalar() or 0

            relevance = score.label("relevance")
            query = (
                select(Apartment, relevance)
                .where(where_clause)
                .order_by(desc(relevance), desc(Apartment.created_at), desc(Apartment.id))
                .offset(skip)
                .limit(limit)
            )
            result = await self.db.execute(query)
            apartments = [row[0] for row in result.all()]

            logger.debug(f"Text search for '{query_text}' returned {len(apartments)} of {total_count}")
            return apartments, total_count
        except Exception as e:
            logger.error(f"Failed to run text search '{query_text}': {e}")
            raise

    async def get_apartment_statistics(self) -> Dict[str, Any]:
        """
        Aggregate listing statistics.

        Returns:
            Dictionary with counts, price aggregates, bedroom distribution
            (ascending by bedrooms) and project counts (descending by count)
        """
        try:
            total_result = await self.db.execute(select(func.count(Apartment.id)))
            total = total_result.scalar() or 0

            available_result = await self.db.execute(
                select(func.count(Apartment.id)).where(Apartment.is_available.is_(True))
            )
            available = available_result.scalar() or 0

            price_result = await self.db.execute(
                select(
                    func.avg(Apartment.price),
                    func.min(Apartment.price),
                    func.max(Apartment.price)
                )
            )
            avg_price, min_price, max_price = price_result.first()

            bedroom_result = await self.db.execute(
                select(Apartment.bedrooms, func.count(Apartment.id))
                .group_by(Apartment.bedrooms)
                .order_by(asc(Apartment.bedrooms))
            )
            bedroom_distribution = {str(row[0]): row[1] for row in bedroom_result.all()}

            project_count = func.count(Apartment.id).label("project_count")
            project_result = await self.db.execute(
                select(Apartment.project, project_count)
                .group_by(Apartment.project)
                .order_by(desc(project_count), asc(Apartment.project))
            )
            project_counts = {row[0]: row[1] for row in project_result.all()}

            statistics = {
                "total": total,
                "available": available,
                "unavailable": total - available,
                "average_price": round(float(avg_price), 2) if avg_price is not None else 0,
                "price_range": {
                    "min": float(min_price) if min_price is not None else 0,
                    "max": float(max_price) if max_price is not None else 0,
                },
                "bedroom_distribution": bedroom_distribution,
                "project_counts": project_counts,
            }

            logger.debug("Generated apartment statistics")
            return statistics
        except Exception as e:
            logger.error(f"Failed to get apartment statistics: {e}")
            raise
