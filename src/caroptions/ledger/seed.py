"""Built-in seed dataset.

Used for the catalog when no ``cars_file`` is configured, and for the
ledger whenever the store has no usable ``"trades"`` / ``"portfolioStats"``
records.  Stored in the persisted record shapes so the same parsing and
validation paths run for seed and saved data.
"""

from __future__ import annotations

from typing import Any

SEED_CARS: list[dict[str, Any]] = [
    {
        "id": "1",
        "name": "Porsche 911 GT3",
        "brand": "Porsche",
        "model": "911 GT3",
        "year": 2022,
        "imageUrl": "/images/porsche-911-gt3.jpg",
        "currentPrice": 182000,
        "priceHistory": [
            {"date": "2023-01-01", "price": 165000},
            {"date": "2023-03-01", "price": 170000},
            {"date": "2023-05-01", "price": 176000},
            {"date": "2023-07-01", "price": 182000},
        ],
    },
    {
        "id": "2",
        "name": "Ferrari 296 GTB",
        "brand": "Ferrari",
        "model": "296 GTB",
        "year": 2023,
        "imageUrl": "/images/ferrari-296-gtb.jpg",
        "currentPrice": 305000,
        "priceHistory": [
            {"date": "2023-01-01", "price": 330000},
            {"date": "2023-03-01", "price": 320000},
            {"date": "2023-05-01", "price": 312000},
            {"date": "2023-07-01", "price": 305000},
        ],
    },
    {
        "id": "3",
        "name": "Lamborghini Huracan EVO",
        "brand": "Lamborghini",
        "model": "Huracan EVO",
        "year": 2021,
        "imageUrl": "/images/lamborghini-huracan-evo.jpg",
        "currentPrice": 268000,
        "priceHistory": [
            {"date": "2023-01-01", "price": 285000},
            {"date": "2023-03-01", "price": 280000},
            {"date": "2023-05-01", "price": 274000},
            {"date": "2023-07-01", "price": 268000},
        ],
    },
    {
        "id": "4",
        "name": "McLaren 720S",
        "brand": "McLaren",
        "model": "720S",
        "year": 2020,
        "imageUrl": "/images/mclaren-720s.jpg",
        "currentPrice": 245000,
        "priceHistory": [
            {"date": "2023-01-01", "price": 240000},
            {"date": "2023-04-01", "price": 238000},
            {"date": "2023-07-01", "price": 245000},
        ],
    },
    {
        "id": "5",
        "name": "Aston Martin DB11",
        "brand": "Aston Martin",
        "model": "DB11",
        "year": 2019,
        "imageUrl": "/images/aston-martin-db11.jpg",
        "currentPrice": 142000,
        "priceHistory": [
            {"date": "2023-01-01", "price": 150000},
            {"date": "2023-04-01", "price": 146000},
            {"date": "2023-07-01", "price": 142000},
        ],
    },
    {
        "id": "6",
        "name": "Mercedes-AMG GT Black Series",
        "brand": "Mercedes-AMG",
        "model": "GT Black Series",
        "year": 2021,
        "imageUrl": "/images/amg-gt-black-series.jpg",
        "currentPrice": 410000,
        "priceHistory": [
            {"date": "2023-07-01", "price": 410000},
        ],
    },
]

SEED_TRADES: list[dict[str, Any]] = [
    {
        "id": "t1",
        "carId": "1",
        "type": "CALL",
        "entryPrice": 170000,
        "currentValue": 12000,
        "expiryDate": "2023-12-31",
        "percentageChange": 5,
        "premium": 8500,
    },
    {
        "id": "t2",
        "carId": "2",
        "type": "PUT",
        "entryPrice": 320000,
        "currentValue": 6000,
        "expiryDate": "2023-09-30",
        "percentageChange": 10,
        "premium": 9600,
    },
    {
        "id": "t3",
        "carId": "3",
        "type": "PUT",
        "entryPrice": 280000,
        "currentValue": 12000,
        "expiryDate": "2023-10-15",
        "percentageChange": 5,
        "premium": 8400,
    },
]

# Maintained fields only; the derived totals are recomputed from SEED_TRADES.
SEED_STATS: dict[str, Any] = {
    "activePositions": 3,
    "totalTrades": 3,
}
