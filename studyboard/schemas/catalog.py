# ============================================================================
# Course Catalog Schemas
# ============================================================================
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Iterator, Union

class CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

class Question(CatalogModel):
    id: str
    statement: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None

class Flashcard(CatalogModel):
    id: str
    front: str = ""
    back: str = ""

class SubTopic(CatalogModel):
    id: str
    name: str
    questions: List[Question] = Field(default_factory=list)
    tec_questions: List[Question] = Field(default_factory=list)
    flashcards: List[Flashcard] = Field(default_factory=list)

class Topic(SubTopic):
    subtopics: List[SubTopic] = Field(default_factory=list)

class Subject(CatalogModel):
    id: str
    name: str
    topics: List[Topic] = Field(default_factory=list)

    def content_items(self) -> List[Union[Topic, SubTopic]]:
        """Topics followed by their subtopics, in catalog order"""
        items: List[Union[Topic, SubTopic]] = []
        for topic in self.topics:
            items.append(topic)
            items.extend(topic.subtopics)
        return items


def iter_content_items(subjects: List[Subject]) -> Iterator[Union[Topic, SubTopic]]:
    for subject in subjects:
        yield from subject.content_items()


def find_content_item(subjects: List[Subject], item_id: str) -> Optional[Union[Topic, SubTopic]]:
    for item in iter_content_items(subjects):
        if item.id == item_id:
            return item
    return None
