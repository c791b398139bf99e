import pandas as pd
from typing import List, Dict, Any
import logging
from pathlib import Path

from ..constants import CSV_COLUMNS
from ..models import Quiz

MAX_OPTION_COLUMNS = 6


class CSVHandler:
    """Writes normalized quizzes as a flat question table."""

    def __init__(self, output_dir: str = "output"):
        self.logger = logging.getLogger(__name__)
        self.output_dir = Path(output_dir)

    def quiz_to_rows(self, quiz: Quiz) -> List[Dict[str, Any]]:
        """Flatten a quiz into one row per question."""
        rows = []
        for question in quiz.questions:
            row = {
                'Platform': quiz.platform,
                'QuestionId': question.id,
                'QuestionType': question.question_type,
                'Question': question.text,
                'CorrectAnswers': ' | '.join(question.correct_texts()),
                'TimeLimit': question.time_limit,
                'ImageUrl': question.image_url,
                'NeedsEnhanceAI': question.needs_enhance_ai,
                'EnhanceReason': question.enhance_reason or ''
            }
            for idx in range(MAX_OPTION_COLUMNS):
                row[f'Option{idx + 1}'] = question.options[idx].text if idx < len(question.options) else ''
            if len(question.options) > MAX_OPTION_COLUMNS:
                self.logger.debug(f"Question {question.id} has {len(question.options)} options, "
                                  f"only {MAX_OPTION_COLUMNS} written")
            rows.append(row)
        return rows

    def to_dataframe(self, quiz: Quiz) -> pd.DataFrame:
        df = pd.DataFrame(self.quiz_to_rows(quiz))
        return self.ensure_csv_structure(df)

    def ensure_csv_structure(self, df: pd.DataFrame) -> pd.DataFrame:
        """Ensure DataFrame has all required columns in the correct order."""
        for col in CSV_COLUMNS:
            if col not in df.columns:
                df[col] = ''
        return df[CSV_COLUMNS]

    def write_quiz(self, quiz: Quiz, csv_file: str, append: bool = False) -> int:
        """
        Write a quiz to a CSV file.

        Args:
            quiz: Normalized quiz
            csv_file: File name (relative to the output dir) or absolute path
            append: Append to an existing file instead of replacing it

        Returns:
            int: Number of rows written
        """
        if not quiz.questions:
            self.logger.info(f"No questions to write to {csv_file}")
            return 0

        csv_path = Path(csv_file)
        if not csv_path.is_absolute():
            csv_path = self.output_dir / csv_path
        csv_path.parent.mkdir(parents=True, exist_ok=True)

        new_df = self.to_dataframe(quiz)

        if append and csv_path.exists():
            existing_df = self.ensure_csv_structure(pd.read_csv(csv_path))
            combined_df = pd.concat([existing_df, new_df], ignore_index=True)
            combined_df.to_csv(csv_path, index=False)
            self.logger.info(f"Appended {len(new_df)} questions to existing {csv_path}")
            self.logger.info(f"Total questions in {csv_path}: {len(combined_df)}")
        else:
            new_df.to_csv(csv_path, index=False)
            self.logger.info(f"Created {csv_path} with {len(new_df)} questions")

        return len(new_df)
