from typing import List
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from model.company_model import Company

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, db: Session):
        self.db = db

    def list_companies(self) -> List[Company]:
        return self.db.query(Company).order_by(Company.name).all()

    def _find(self, name: str):
        return self.db.query(Company).filter(Company.name == name).first()

    def get_or_create(self, name: str) -> Company:
        """Return the company called `name`, creating it on first use."""
        company = self._find(name)
        if company:
            return company

        try:
            company = Company(name=name)
            self.db.add(company)
            self.db.commit()
        except IntegrityError:
            # saved by a concurrent request
            self.db.rollback()
            company = self._find(name)
            if company is None:
                raise
            return company
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(company)
        logger.info("Company created", extra={"company_id": company.id})
        return company
