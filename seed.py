#!/usr/bin/env python3
"""
Database seeding script.
Creates the schema and loads sample users and apartments.

Usage:
    python seed.py            # add sample data, skipping records that exist
    python seed.py --reset    # delete all users and apartments first
"""

import asyncio
import argparse
import logging
import sys
from typing import Any, Dict, List

from sqlalchemy import delete

from app.config import settings
from app.database import AsyncSessionLocal, create_tables, close_db_connection
from app.models.apartment import Apartment
from app.models.user import User
from app.repositories.apartment import ApartmentRepository
from app.repositories.user import UserRepository

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "Password123!"

SAMPLE_USERS: List[Dict[str, Any]] = [
    {"name": "Test User", "email": "test@test.com", "phone": "+14155550000"},
    {"name": "John Smith", "email": "john.smith@example.com", "phone": "+14155551234"},
    {"name": "Sarah Johnson", "email": "sarah.johnson@example.com", "phone": "+12125551234"},
    {"name": "Michael Chen", "email": "michael.chen@example.com", "phone": "+13125551234"},
    {"name": "Emily Davis", "email": "emily.davis@example.com", "phone": "+15125551234"},
]

TEST_HEIGHTS = {
    "project": "Test Heights",
    "address": "123 Test Street",
    "city": "San Francisco",
    "state": "California",
    "zip_code": "94102",
    "contact_email": "test@example.com",
    "contact_phone": "+14155550000",
}

# Listings owned by the first sample user
TEST_USER_APARTMENTS: List[Dict[str, Any]] = [
    {
        **TEST_HEIGHTS,
        "unit_name": "Test Property 1 - Luxury Studio",
        "unit_number": "T101",
        "description": "Premium test studio apartment with stunning city views. Features include hardwood floors, stainless steel appliances, and floor-to-ceiling windows.",
        "bedrooms": 0, "bathrooms": 1, "square_footage": 550, "price": 2200,
        "amenities": ["Gym", "Pool", "Concierge", "Rooftop Deck", "Package Service"],
        "is_available": True, "pet_policy": "conditional", "parking_spaces": 1,
        "lease_terms": ["12 months", "24 months"],
        "virtual_tour_url": "https://example.com/tour/t101",
    },
    {
        **TEST_HEIGHTS,
        "unit_name": "Test Property 2 - Spacious One Bedroom",
        "unit_number": "T205",
        "description": "Bright one-bedroom test apartment with modern finishes and an open-concept living area. Includes in-unit laundry and a private balcony.",
        "bedrooms": 1, "bathrooms": 1, "square_footage": 750, "price": 2800,
        "amenities": ["Gym", "Pool", "Concierge", "In-unit Laundry"],
        "is_available": True, "pet_policy": "allowed", "parking_spaces": 1,
        "lease_terms": ["12 months", "18 months", "24 months"],
    },
    {
        **TEST_HEIGHTS,
        "unit_name": "Test Property 3 - Family Two Bedroom",
        "unit_number": "T310",
        "description": "Two-bedroom unit with a large living room, updated kitchen with granite countertops, and two full bathrooms.",
        "bedrooms": 2, "bathrooms": 2, "square_footage": 1100, "price": 3500,
        "amenities": ["Gym", "Pool", "Children's Playground"],
        "is_available": False, "pet_policy": "allowed", "parking_spaces": 2,
        "lease_terms": ["12 months", "24 months"],
    },
    {
        **TEST_HEIGHTS,
        "unit_name": "Test Property 4 - Premium Three Bedroom",
        "unit_number": "T501",
        "description": "Spacious three-bedroom test property with premium finishes, a master suite, gourmet kitchen, and multiple balconies.",
        "bedrooms": 3, "bathrooms": 2.5, "square_footage": 1400, "price": 4200,
        "amenities": ["Gym", "Pool", "Master Suite", "Multiple Balconies"],
        "is_available": True, "pet_policy": "allowed", "parking_spaces": 2,
        "lease_terms": ["12 months", "24 months", "36 months"],
        "virtual_tour_url": "https://example.com/tour/t501",
    },
]

# Spread across the remaining users in order
SAMPLE_APARTMENTS: List[Dict[str, Any]] = [
    {
        "unit_name": "Luxury Studio", "unit_number": "A101", "project": "Sunset Heights",
        "description": "Modern studio apartment with stunning city views and floor-to-ceiling windows.",
        "bedrooms": 0, "bathrooms": 1, "square_footage": 550, "price": 2200,
        "address": "123 Main Street", "city": "San Francisco", "state": "California", "zip_code": "94102",
        "amenities": ["Gym", "Pool", "Concierge"], "is_available": True, "pet_policy": "conditional",
        "parking_spaces": 1, "lease_terms": ["12 months", "24 months"],
        "contact_email": "leasing@sunsetheights.com", "contact_phone": "+14155551234",
    },
    {
        "unit_name": "Cozy Studio", "unit_number": "1A", "project": "Downtown Lofts",
        "description": "Charming studio in the heart of downtown with exposed brick and high ceilings.",
        "bedrooms": 0, "bathrooms": 1, "square_footage": 450, "price": 1800,
        "address": "456 Broadway", "city": "New York", "state": "New York", "zip_code": "10013",
        "amenities": ["Laundry", "Bike Storage"], "is_available": True, "pet_policy": "not-allowed",
        "parking_spaces": 0, "lease_terms": ["12 months"],
        "contact_email": "rent@downtownlofts.com", "contact_phone": "+12125551234",
    },
    {
        "unit_name": "Luxury Penthouse", "unit_number": "PH1", "project": "Riverside Towers",
        "description": "Top floor penthouse with panoramic river views and a private terrace.",
        "bedrooms": 3, "bathrooms": 2.5, "square_footage": 1800, "price": 5500,
        "address": "789 River Road", "city": "Chicago", "state": "Illinois", "zip_code": "60601",
        "amenities": ["Private Terrace", "Concierge", "Wine Cellar"], "is_available": True,
        "pet_policy": "allowed", "parking_spaces": 2, "lease_terms": ["12 months", "24 months"],
        "contact_email": "info@riversidetowers.com", "contact_phone": "+13125551234",
        "virtual_tour_url": "https://example.com/tour/ph1",
    },
    {
        "unit_name": "Executive Two Bedroom", "unit_number": "1501", "project": "Tech Plaza",
        "description": "High-rise two bedroom near the tech corridor with a dedicated office nook.",
        "bedrooms": 2, "bathrooms": 2, "square_footage": 1050, "price": 4200,
        "address": "100 Congress Avenue", "city": "Austin", "state": "Texas", "zip_code": "78701",
        "amenities": ["Co-working Space", "Gym", "EV Charging"], "is_available": False,
        "pet_policy": "conditional", "parking_spaces": 1, "lease_terms": ["6 months", "12 months"],
        "contact_email": "leasing@techplaza.com", "contact_phone": "+15125551234",
    },
    {
        "unit_name": "Compact Studio", "unit_number": "301", "project": "Urban Living",
        "description": "Efficient studio apartment perfect for young professionals, with clever storage solutions.",
        "bedrooms": 0, "bathrooms": 1, "square_footage": 400, "price": 1650,
        "address": "200 Pine Street", "city": "Seattle", "state": "Washington", "zip_code": "98101",
        "amenities": ["Rooftop Deck", "Bike Storage"], "is_available": True, "pet_policy": "not-allowed",
        "parking_spaces": 0, "lease_terms": ["12 months"],
        "contact_email": "hello@urbanliving.com", "contact_phone": "+12065551234",
    },
    {
        "unit_name": "Urban Two Bedroom", "unit_number": "8B", "project": "Metro Central",
        "description": "Contemporary two-bedroom apartment with subway access and an open floor plan.",
        "bedrooms": 2, "bathrooms": 1.5, "square_footage": 950, "price": 3200,
        "address": "222 Metro Plaza", "city": "Washington", "state": "District of Columbia", "zip_code": "20001",
        "amenities": ["Metro Access", "Gym", "Rooftop Deck"], "is_available": False,
        "pet_policy": "conditional", "parking_spaces": 1, "lease_terms": ["12 months", "18 months"],
        "contact_email": "leasing@metrocentral.com", "contact_phone": "+12025551234",
    },
    {
        "unit_name": "Waterfront One Bedroom", "unit_number": "W101", "project": "Harbor View",
        "description": "Stunning waterfront views from this one-bedroom apartment with a private balcony.",
        "bedrooms": 1, "bathrooms": 1, "square_footage": 680, "price": 2700,
        "address": "333 Harbor Street", "city": "Portland", "state": "Oregon", "zip_code": "97201",
        "amenities": ["Waterfront", "Private Balcony", "Gym"], "is_available": True,
        "pet_policy": "allowed", "parking_spaces": 1, "lease_terms": ["12 months", "24 months"],
        "contact_email": "harbor@harborview.com", "contact_phone": "+15035551234",
    },
    {
        "unit_name": "Garden Studio", "unit_number": "G10", "project": "Green Valley",
        "description": "Peaceful studio apartment with garden access and natural lighting.",
        "bedrooms": 0, "bathrooms": 1, "square_footage": 480, "price": 1750,
        "address": "777 Green Valley Road", "city": "Phoenix", "state": "Arizona", "zip_code": "85001",
        "amenities": ["Garden Access", "Pool", "Pet Park"], "is_available": True,
        "pet_policy": "allowed", "parking_spaces": 1, "lease_terms": ["12 months", "24 months"],
        "contact_email": "nature@greenvalley.com", "contact_phone": "+16025551234",
    },
    {
        "unit_name": "Historic One Bedroom", "unit_number": "H205", "project": "Old Town Residences",
        "description": "Beautifully restored one-bedroom in a historic building with modern conveniences.",
        "bedrooms": 1, "bathrooms": 1, "square_footage": 650, "price": 2000,
        "address": "123 Historic Street", "city": "Savannah", "state": "Georgia", "zip_code": "31401",
        "amenities": ["Historic Character", "Courtyard"], "is_available": False,
        "pet_policy": "not-allowed", "parking_spaces": 0, "lease_terms": ["12 months", "24 months"],
        "contact_email": "historic@oldtownresidences.com", "contact_phone": "+19125551234",
    },
    {
        "unit_name": "River View Two Bedroom", "unit_number": "R402", "project": "Riverside Commons",
        "description": "Spectacular river views from this spacious two-bedroom with a large balcony.",
        "bedrooms": 2, "bathrooms": 2, "square_footage": 1150, "price": 3400,
        "address": "456 Riverside Drive", "city": "Nashville", "state": "Tennessee", "zip_code": "37201",
        "amenities": ["River Views", "Pool", "Dog Park"], "is_available": True,
        "pet_policy": "allowed", "parking_spaces": 2, "lease_terms": ["12 months", "18 months", "24 months"],
        "contact_email": "riverside@riversidecommons.com", "contact_phone": "+16155551234",
    },
]


class SeedManager:
    """Loads sample data through the repositories."""

    async def reset(self, session) -> None:
        """Delete every apartment and user."""
        await session.execute(delete(Apartment))
        await session.execute(delete(User))
        await session.commit()
        logger.info("Deleted all apartments and users")

    async def seed_users(self, session) -> List[User]:
        user_repo = UserRepository(session)
        users = []

        for user_data in SAMPLE_USERS:
            existing = await user_repo.get_by_email(user_data["email"])
            if existing:
                logger.info(f"User {user_data['email']} already exists, skipping")
                users.append(existing)
                continue
            users.append(await user_repo.create_user({**user_data, "password": SAMPLE_PASSWORD}))

        return users

    async def seed_apartments(self, session, users: List[User]) -> int:
        apartment_repo = ApartmentRepository(session)
        owners = users[1:] or users

        assignments = [(users[0], data) for data in TEST_USER_APARTMENTS]
        assignments += [
            (owners[index % len(owners)], data)
            for index, data in enumerate(SAMPLE_APARTMENTS)
        ]

        created = 0
        for owner, apartment_data in assignments:
            if await apartment_repo.get_by_unit(apartment_data["unit_number"], apartment_data["project"]):
                logger.info(
                    f"Apartment {apartment_data['unit_number']} in {apartment_data['project']} exists, skipping"
                )
                continue
            await apartment_repo.create_apartment({**apartment_data, "user_id": owner.id})
            created += 1

        return created

    async def run(self, reset: bool = False) -> None:
        logger.info(f"Seeding database for environment: {settings.environment}")
        await create_tables()

        async with AsyncSessionLocal() as session:
            try:
                if reset:
                    await self.reset(session)

                users = await self.seed_users(session)
                created = await self.seed_apartments(session, users)

                logger.info(f"Seed complete: {len(users)} users, {created} new apartments")
                logger.info(f"Sample users log in with password: {SAMPLE_PASSWORD}")
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to seed database: {e}")
                raise

        await close_db_connection()


def main():
    parser = argparse.ArgumentParser(description="Seed the database with sample users and apartments")
    parser.add_argument("--reset", action="store_true", help="Delete all users and apartments before seeding")
    args = parser.parse_args()

    try:
        asyncio.run(SeedManager().run(reset=args.reset))
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
