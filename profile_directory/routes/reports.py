"""
Report routes: users flag comments, moderators review and dismiss reports.
"""
import logging
from flask import Blueprint, request, jsonify
from sqlalchemy.orm import aliased

from profile_directory.database import get_session
from profile_directory.models.account import Account
from profile_directory.models.comment import Comment
from profile_directory.models.report import Report
from profile_directory.models.user import User

logger = logging.getLogger(__name__)

bp = Blueprint('reports', __name__)


@bp.route('/reports')
def list_reports():
    """Moderator queue, newest first, with the reported comment and its account."""
    session = get_session()
    try:
        reported = aliased(User)
        reporter = aliased(User)
        rows = (
            session.query(Report, reported.login, reporter.login, Comment.text, Comment.account_id, Account.name)
            .join(reported, Report.reported_user_id == reported.id)
            .join(reporter, Report.reporter_user_id == reporter.id)
            .outerjoin(Comment, Report.comment_id == Comment.id)
            .outerjoin(Account, Comment.account_id == Account.id)
            .order_by(Report.created_at.desc(), Report.id.desc())
            .all()
        )
        result = []
        for report, reported_login, reporter_login, comment_text, account_id, account_name in rows:
            result.append({
                'id': report.id,
                'comment_id': report.comment_id,
                'reported_user_id': report.reported_user_id,
                'reported_user_login': reported_login,
                'reporter_user_id': report.reporter_user_id,
                'reporter_user_login': reporter_login,
                'account_id': account_id,
                'account_name': account_name,
                'report_text': report.text,
                'comment_text': comment_text,
                'created_at': report.created_at.isoformat() if report.created_at else None,
            })
        return jsonify(result)
    except Exception as e:
        logger.error("Report listing failed", exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/add-reports', methods=['POST'])
def add_report():
    data = request.get_json(silent=True) or {}
    comment_id = data.get('comment_id')
    reported_user_id = data.get('reported_user_id')
    reporter_user_id = data.get('reporter_user_id')
    text = (data.get('text') or '').strip()
    if not comment_id or not reported_user_id or not reporter_user_id or not text:
        return jsonify({'error': 'Все поля обязательны'}), 400

    session = get_session()
    try:
        existing = session.query(Report).filter_by(
            comment_id=comment_id, reporter_user_id=reporter_user_id,
        ).first()
        if existing:
            return jsonify({'error': 'Вы уже отправили жалобу на этот комментарий'}), 409
        report = Report(
            comment_id=comment_id,
            reported_user_id=reported_user_id,
            reporter_user_id=reporter_user_id,
            text=text,
        )
        session.add(report)
        session.commit()
        return jsonify(report.to_dict()), 201
    except Exception:
        session.rollback()
        logger.error("Error adding report", exc_info=True)
        return jsonify({'error': 'Ошибка сервера'}), 500
    finally:
        session.close()


@bp.route('/delete-reports', methods=['DELETE'])
def delete_report():
    data = request.get_json(silent=True) or {}
    report_id = data.get('id')

    session = get_session()
    try:
        removed = 0
        if report_id:
            removed = session.query(Report).filter(Report.id == report_id).delete(synchronize_session=False)
        if not removed:
            return jsonify({'error': 'Репорт не найден'}), 404
        session.commit()
        return jsonify({'message': 'Репорт успешно удалён'})
    except Exception:
        session.rollback()
        logger.error("Error deleting report %s", report_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера'}), 500
    finally:
        session.close()
