"""Bundled starter question bank."""

from truenorth.services.trivia.records import Question

# (prompt, label, explanation, tags)
QUESTIONS = [
    ('Hawaiian pizza', 'CAN', 'Invented by Sam Panopoulos in Ontario, Canada in 1962.', 'food,invention'),
    ('IMAX large-format cinema', 'CAN', 'IMAX technology was invented by Canadian filmmakers in 1967.', 'technology,invention'),
    ('Insulin discovery', 'CAN', 'Discovered by Frederick Banting and Charles Best in Toronto, 1921.', 'science,medicine'),
    ('Trivial Pursuit board game', 'CAN', 'Created in Montreal, Quebec by Chris Haney and Scott Abbott in 1979.', 'games,invention'),
    ('The walkie-talkie', 'CAN', 'The portable two-way radio was invented by Canadian Donald Hings in 1937.', 'technology,invention'),
    ('Snowmobile / Ski-Doo', 'CAN', 'Invented by Joseph-Armand Bombardier in Quebec, 1935.', 'transportation,invention'),
    ('BlackBerry smartphone', 'CAN', 'Created by Research In Motion (RIM) in Waterloo, Ontario.', 'technology,brand'),
    ('Cirque du Soleil', 'CAN', 'Founded in Baie-Saint-Paul, Quebec in 1984.', 'entertainment,brand'),
    ('Caesar cocktail', 'CAN', 'The Bloody Caesar was invented in Calgary, Alberta in 1969.', 'food,drink'),
    ('Nanaimo bar dessert', 'CAN', 'Named after the city of Nanaimo, British Columbia.', 'food,dessert'),
    ('Poutine', 'CAN', 'Originated in rural Quebec in the late 1950s.', 'food,dish'),
    ('Roots clothing brand', 'CAN', 'Founded in Toronto in 1973.', 'brand,fashion'),
    ('Canada Goose outerwear', 'CAN', 'Founded in Toronto in 1957 as Metro Sportswear Ltd.', 'brand,fashion'),
    ('Wayne Gretzky', 'CAN', 'Born in Brantford, Ontario. The Great One is Canadian.', 'people,sports'),
    ('Celine Dion', 'CAN', 'Born in Charlemagne, Quebec.', 'people,music'),
    ('Ryan Gosling', 'CAN', 'Born in London, Ontario.', 'people,entertainment'),
    ('Basketball (the sport)', 'USA', 'Invented in Springfield, Massachusetts by Canadian James Naismith in 1891.', 'sports,invention'),
    ('Starbucks', 'USA', 'Founded in Seattle, Washington in 1971.', 'brand,coffee'),
    ("Hershey's chocolate", 'USA', 'Founded in Hershey, Pennsylvania in 1894.', 'brand,food'),
    ('Yellowstone National Park', 'USA', "America's first national park, established in 1872.", 'nature,landmark'),
    ('Mount Rushmore', 'USA', 'Located in the Black Hills of South Dakota.', 'landmark,monument'),
    ('Golden Gate Bridge', 'USA', 'Iconic suspension bridge in San Francisco, California.', 'landmark,architecture'),
    ('Chicago deep-dish pizza', 'USA', 'Invented at Pizzeria Uno in Chicago, Illinois in 1943.', 'food,dish'),
    ('Super Bowl', 'USA', 'American football championship game of the NFL.', 'sports,event'),
    ('Harley-Davidson motorcycles', 'USA', 'Founded in Milwaukee, Wisconsin in 1903.', 'brand,transportation'),
    ('NASA', 'USA', 'The National Aeronautics and Space Administration is a U.S. agency.', 'organization,space'),
    ('Grand Canyon', 'USA', 'Located in Arizona.', 'nature,landmark'),
    ("McDonald's", 'USA', 'Founded in San Bernardino, California in 1940.', 'brand,food'),
    ("Blue jeans (Levi's)", 'USA', 'Levi Strauss invented blue jeans in San Francisco in 1873.', 'fashion,invention'),
    ('Jazz music', 'USA', 'Originated in New Orleans, Louisiana in the early 20th century.', 'music,culture'),
    ('Route 66', 'USA', 'Historic highway running from Chicago to Santa Monica.', 'landmark,transportation'),
    ('Times Square', 'USA', 'Major commercial intersection in New York City.', 'landmark,location'),
]


def seed_questions(store) -> int:
    """Insert bundled questions whose ids are free. Returns how many were added."""
    added = 0
    with store.transaction():
        for i, (prompt, label, explanation, tags) in enumerate(QUESTIONS, start=1):
            qid = f'q{i}'
            if store.get_question(qid) is not None:
                continue
            store.add_question(Question(
                id=qid,
                prompt=prompt,
                label=label,
                explanation=explanation,
                tags=frozenset(tags.split(',')),
            ))
            added += 1
    return added
